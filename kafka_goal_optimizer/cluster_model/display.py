# Copyright 2016 Yelp Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
from __future__ import annotations

from collections import OrderedDict
from typing import Any
from typing import TYPE_CHECKING

import humanfriendly

import kafka_goal_optimizer.cluster_model.stats as stats
from kafka_goal_optimizer.cluster_model.cluster_model import ClusterModel
from kafka_goal_optimizer.cluster_model.resource import Resource
from kafka_goal_optimizer.util import format_ratio

if TYPE_CHECKING:
    from kafka_goal_optimizer.analyzer.goal_optimizer import GoalReport

# Disk load and capacity are expressed in megabytes
DISK_UNIT = 1000 ** 2


def format_disk(megabytes: float) -> str:
    return humanfriendly.format_size(int(megabytes * DISK_UNIT))


def display_table(headers: list[str], table: list[list[Any]]) -> None:
    """Print a formatted table.

    :param headers: A list of header objects that are displayed in the first
        row of the table.
    :param table: A list of lists where each sublist is a row of the table.
        The number of elements in each row should be equal to the number of
        headers.
    """
    assert all(len(row) == len(headers) for row in table)

    str_headers = [str(header) for header in headers]
    str_table = [[str(cell) for cell in row] for row in table]
    column_lengths = [
        max(len(header), *(len(row[i]) for row in str_table))
        for i, header in enumerate(str_headers)
    ]

    print(
        " | ".join(
            header.ljust(length)
            for header, length in zip(str_headers, column_lengths)
        )
    )
    print("-+-".join("-" * length for length in column_lengths))
    for row in str_table:
        print(
            " | ".join(
                cell.ljust(length)
                for cell, length in zip(row, column_lengths)
            )
        )


def display_broker_utilization(cluster_model: ClusterModel) -> None:
    """Display load and utilization of every broker, dead ones included."""
    headers = ['Broker', 'Rack', 'Alive', 'Replicas', 'Leaders']
    headers += [str(resource) for resource in Resource]
    headers.append('potential_nw_out')
    rows = []
    for broker_id in sorted(cluster_model.brokers):
        broker = cluster_model.brokers[broker_id]
        row = [
            broker.id,
            broker.rack,
            'yes' if broker.alive else 'no',
            broker.replica_count,
            broker.leader_count,
        ]
        for resource in Resource:
            if resource is Resource.DISK:
                load = format_disk(broker.load(resource))
            else:
                load = f'{broker.load(resource):.2f}'
            row.append(
                '{load} ({ratio})'.format(
                    load=load,
                    ratio=format_ratio(broker.utilization(resource)),
                )
            )
        row.append(f'{broker.potential_nw_out:.2f}')
        rows.append(row)
    display_table(headers, rows)


def display_utilization_stats(cluster_models: dict[str, ClusterModel]) -> None:
    """Display mean, stdev and cv of the utilization of each resource over
    the alive brokers.

    :param cluster_models: A dictionary mapping a string name to a
        ClusterModel object.
    """
    names = list(cluster_models.keys())
    all_stats = [
        stats.get_utilization_stats(cluster_model)
        for cluster_model in cluster_models.values()
    ]
    if len(names) == 1:
        headers = ['Resource', 'Mean', 'Stdev', 'CV', 'Max', 'Min']
    else:
        headers = ['Resource'] + [
            f'{name} {column}'
            for name in names
            for column in ('Mean', 'Stdev', 'CV', 'Max', 'Min')
        ]
    rows = []
    for index, resource in enumerate(Resource):
        row: list[Any] = [resource]
        for model_stats in all_stats:
            if not model_stats:
                row += ['-'] * 5
                continue
            resource_stats = model_stats[index]
            row += [
                format_ratio(resource_stats.mean),
                format_ratio(resource_stats.stdev),
                f'{resource_stats.cv:.3f}',
                format_ratio(resource_stats.max),
                format_ratio(resource_stats.min),
            ]
        rows.append(row)
    display_table(headers, rows)


def display_movements_stats(cluster_model: ClusterModel, base_assignment: dict[tuple[str, int], list[int]]) -> None:
    """Display how the amount of movement between two assignments.

    :param cluster_model: The cluster's ClusterModel.
    :param base_assignment: The cluster assignment to compare against.
    """
    movement_count, movement_size, leader_changes = \
        stats.get_partition_movement_stats(cluster_model, base_assignment)
    print(
        'Total replica movements: {movement_count}\n'
        'Total replica movement size: {movement_size}\n'
        'Total leader changes: {leader_changes}'
        .format(
            movement_count=movement_count,
            movement_size=format_disk(movement_size),
            leader_changes=leader_changes,
        )
    )


def display_cluster_model_stats(
    cluster_model: ClusterModel,
    base_assignment: dict[tuple[str, int], list[int]] | None = None,
) -> None:
    if base_assignment:
        base_cluster_model = cluster_model.copy()
        base_cluster_model.restore(base_assignment)
        cluster_models = OrderedDict([
            ('Before', base_cluster_model),
            ('After', cluster_model),
        ])
    else:
        cluster_models = OrderedDict([
            ('', cluster_model),
        ])

    display_broker_utilization(cluster_model)
    print("")
    display_utilization_stats(cluster_models)
    if base_assignment:
        print("")
        display_movements_stats(cluster_model, base_assignment)


def display_goal_report(goal_reports: list[GoalReport]) -> None:
    """Display the outcome of every goal, in priority order."""
    display_table(
        ['Priority', 'Goal', 'Type', 'Satisfied', 'Movements', 'Imbalance before', 'Imbalance after'],
        [
            [
                report.priority,
                report.name,
                'hard' if report.is_hard_goal else 'soft',
                'yes' if report.satisfied else 'no',
                report.movement_count,
                f'{report.imbalance_before:.4f}',
                f'{report.imbalance_after:.4f}',
            ]
            for report in goal_reports
        ],
    )
