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
"""Provide functions to generate and validate a Kafka reassignment plan
out of an optimization result.
"""
from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from typing import Any
from typing import TYPE_CHECKING

from typing_extensions import TypedDict

if TYPE_CHECKING:
    from kafka_goal_optimizer.cluster_model.movement import ReplicaMovement


_log = logging.getLogger(__name__)


class PartitionDict(TypedDict):
    topic: str
    partition: int
    replicas: list[int]


class PlanDict(TypedDict):
    version: int
    partitions: list[PartitionDict]


def plan_to_assignment(plan: PlanDict) -> dict[tuple[str, int], list[int]]:
    """Convert the plan to the format used by the cluster model."""
    return {
        (elem['topic'], elem['partition']): elem['replicas']
        for elem in plan['partitions']
    }


def assignment_to_plan(assignment: dict[tuple[str, int], list[int]]) -> PlanDict:
    """Convert an assignment to the format used by Kafka to
    describe a reassignment plan.
    """
    return {
        'version': 1,
        'partitions': [
            {
                'topic': t_p[0],
                'partition': t_p[1],
                'replicas': list(replicas),
            }
            for t_p, replicas in assignment.items()
        ],
    }


def movements_to_dicts(movements: Iterable[ReplicaMovement]) -> list[dict[str, Any]]:
    """Serializable form of an action list, in execution order."""
    return [movement.to_dict() for movement in movements]


def validate_plan(
    new_plan: PlanDict,
    base_plan: PlanDict | None = None,
    dead_brokers: Iterable[int] = (),
) -> bool:
    """Verify that the new plan is valid for execution.

    Given kafka-reassignment plan should affirm with following rules:
    - Plan should have at least one partition for re-assignment
    - Partition-name list should be subset of base-plan partition-list
    - Replication-factor for each partition remains unchanged
    - No duplicate broker-ids in each replicas
    - No replica assigned to a dead broker
    """
    if not _validate_plan(new_plan):
        _log.error('Invalid proposed-plan.')
        return False

    dead = set(dead_brokers)
    for p_data in new_plan['partitions']:
        on_dead = dead.intersection(p_data['replicas'])
        if on_dead:
            _log.error(
                'Partition ({topic}, {p_id}) assigned to dead brokers {brokers}'
                .format(
                    topic=p_data['topic'],
                    p_id=p_data['partition'],
                    brokers=sorted(on_dead),
                )
            )
            return False

    if base_plan:
        if not _validate_plan(base_plan):
            _log.error('Invalid assignment from cluster.')
            return False
        if not _validate_plan_base(new_plan, base_plan):
            return False
    return True


def _validate_plan_base(new_plan: PlanDict, base_plan: PlanDict) -> bool:
    """Validate the new plan against the assignment it was computed from.

    - Partition-check: New partition-set should be subset of base-partition set
    - Replica-count check: Replication-factor for each partition remains same
    """
    base_assignment = plan_to_assignment(base_plan)
    new_assignment = plan_to_assignment(new_plan)

    invalid_partitions = sorted(set(new_assignment) - set(base_assignment))
    if invalid_partitions:
        _log.error(
            'Invalid partition(s) found: {p_list}'.format(
                p_list=invalid_partitions,
            )
        )
        return False

    valid = True
    for partition, replicas in new_assignment.items():
        if len(replicas) != len(base_assignment[partition]):
            valid = False
            _log.error(
                'Replication-factor Mismatch: Partition: {partition}: '
                'Base-replicas: {expected}, Proposed-replicas: {actual}'
                .format(
                    partition=partition,
                    expected=base_assignment[partition],
                    actual=replicas,
                ),
            )
    return valid


def _validate_format(plan: PlanDict) -> bool:
    """Validate if the format of the plan as expected.

    Sample-plan format:
    {
        "version": 1,
        "partitions": [
            {"partition":0, "topic":'t1', "replicas":[0,1,2]},
            {"partition":0, "topic":'t2', "replicas":[1,2]},
            ...
        ]}
    """
    if not isinstance(plan, dict):
        _log.error('Plan expected as a json object.')
        return False

    if set(plan.keys()) != {'version', 'partitions'}:
        _log.error(
            'Invalid or incomplete keys in given plan. Expected: "version", '
            '"partitions". Found:{keys}'
            .format(keys=', '.join(list(plan.keys()))),
        )
        return False

    if plan['version'] != 1:
        _log.error(
            'Invalid version of plan {version}'
            .format(version=plan['version']),
        )
        return False

    if not isinstance(plan['partitions'], list) or not plan['partitions']:
        _log.error('"partitions" expected as a non-empty list.')
        return False

    for p_data in plan['partitions']:
        if not isinstance(p_data, dict):
            _log.error('Invalid partition-data {p_data}'.format(p_data=p_data))
            return False
        if set(p_data.keys()) != {'topic', 'partition', 'replicas'}:
            _log.error(
                'Invalid keys in partition-data {keys}'
                .format(keys=', '.join(list(p_data.keys()))),
            )
            return False
        if (
            not isinstance(p_data['topic'], str) or
            not isinstance(p_data['partition'], int) or
            not isinstance(p_data['replicas'], list)
        ):
            _log.error('Invalid types in partition-data {p_data}'.format(p_data=p_data))
            return False
        if not p_data['replicas']:
            _log.error(
                'Non-empty "replicas" expected: {p_data}'
                .format(p_data=p_data),
            )
            return False
        if not all(isinstance(broker, int) for broker in p_data['replicas']):
            _log.error(
                '"replicas" of type integer list expected {p_data}'
                .format(p_data=p_data),
            )
            return False
    return True


def _validate_plan(plan: PlanDict) -> bool:
    """Validate format, unique partitions and unique brokers per partition."""
    if not _validate_format(plan):
        return False

    partition_names = [
        (p_data['topic'], p_data['partition'])
        for p_data in plan['partitions']
    ]
    duplicate_partitions = [
        partition for partition, count in Counter(partition_names).items()
        if count > 1
    ]
    if duplicate_partitions:
        _log.error(
            'Duplicate partitions in plan {p_list}'
            .format(p_list=duplicate_partitions),
        )
        return False

    for p_data in plan['partitions']:
        if len(set(p_data['replicas'])) != len(p_data['replicas']):
            _log.error(
                'Duplicate brokers: ({topic}, {p_id}) in replicas {replicas}'
                .format(
                    topic=p_data['topic'],
                    p_id=p_data['partition'],
                    replicas=p_data['replicas'],
                )
            )
            return False
    return True
