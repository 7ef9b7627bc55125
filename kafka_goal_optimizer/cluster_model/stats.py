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
"""This files contains supporting api's required to evaluate stats of the
cluster model at any given time.
"""
from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Sequence
from math import sqrt
from typing import NamedTuple
from typing import TYPE_CHECKING

from .resource import Resource

if TYPE_CHECKING:
    from .broker import Broker
    from .cluster_model import ClusterModel


class UtilizationStats(NamedTuple):
    resource: Resource
    mean: float
    stdev: float
    cv: float
    max: float
    min: float


def mean(data: Sequence[float]) -> float:
    """Return the mean of a sequence of numbers."""
    return sum(data) / len(data)


def variance(data: Sequence[float], data_mean: float | None = None) -> float:
    """Return variance of a sequence of numbers.
    :param data_mean: Precomputed mean of the sequence.
    """
    if data_mean is None:
        data_mean = mean(data)
    return sum((x - data_mean) ** 2 for x in data) / len(data)


def standard_deviation(
    data: Sequence[float],
    data_mean: float | None = None,
    data_variance: float | None = None,
) -> float:
    """Return the population standard deviation of a sequence of numbers.
    :param data_mean: Precomputed mean of the sequence.
    :param data_variance: Precomputed variance of the sequence.
    """
    if data_variance is None:
        data_variance = variance(data, data_mean)
    return sqrt(data_variance)


def coefficient_of_variation(
    data: Sequence[float],
    data_mean: float | None = None,
    data_stdev: float | None = None,
) -> float:
    """Return the coefficient of variation (CV) of a sequence of numbers.
    :param data_mean: Precomputed mean of the sequence.
    :param data_stdev: Precomputed standard_deviation of the sequence.
    """
    if data_mean is None:
        data_mean = mean(data)
    if data_stdev is None:
        data_stdev = standard_deviation(data, data_mean)
    if data_mean == 0:
        return float("inf") if data_stdev != 0 else 0
    else:
        return data_stdev / data_mean


def get_broker_utilizations(brokers: Iterable[Broker], resource: Resource) -> list[float]:
    """Get a list containing the utilization of resource on each broker"""
    return [broker.utilization(resource) for broker in brokers]


def get_utilization_stats(cluster_model: ClusterModel) -> list[UtilizationStats]:
    """Utilization statistics of every resource over the alive brokers."""
    brokers = cluster_model.alive_brokers()
    if not brokers:
        return []
    result = []
    for resource in Resource:
        utilizations = get_broker_utilizations(brokers, resource)
        data_mean = mean(utilizations)
        data_stdev = standard_deviation(utilizations, data_mean)
        result.append(UtilizationStats(
            resource,
            data_mean,
            data_stdev,
            coefficient_of_variation(utilizations, data_mean, data_stdev),
            max(utilizations),
            min(utilizations),
        ))
    return result


def get_partition_movement_stats(
    cluster_model: ClusterModel,
    prev_assignment: dict[tuple[str, int], list[int]],
) -> tuple[int, float, int]:
    """Return the replica movement count, the disk load moved and the number
    of leader changes between prev_assignment and the current model.
    """
    curr_assignment = cluster_model.assignment
    movement_count = 0
    movement_size = 0.0
    leader_changes = 0
    for prev_partition, prev_replicas in prev_assignment.items():
        curr_replicas = curr_assignment[prev_partition]
        partition = cluster_model.partitions[prev_partition]
        for replica in partition.replicas:
            if replica.broker.id not in prev_replicas:
                movement_count += 1
                movement_size += replica.load[Resource.DISK]

        curr_leader = curr_replicas and curr_replicas[0] or None
        prev_leader = prev_replicas and prev_replicas[0] or None
        if curr_leader != prev_leader:
            leader_changes += 1

    return movement_count, movement_size, leader_changes
