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
"""Build a ClusterModel from a JSON snapshot of the cluster.

Example snapshot:
.. code-block:: json

   {
       "brokers": [
           {"id": 0, "rack": "r0", "alive": true,
            "capacity": {"cpu": 100, "disk": 500000}},
           {"id": 1, "rack": "r1", "alive": false}
       ],
       "partitions": [
           {"topic": "t0", "partition": 0, "replicas": [0, 1],
            "load": {"cpu": 2.5, "disk": 1200, "network_inbound": 30,
                     "network_outbound": 60}}
       ]
   }

``follower_load`` may be given per partition; otherwise it is estimated
from the leader load.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from .cluster_model import ClusterModel
from .error import InvalidSnapshotError
from .load_measurer import LoadMeasurer
from .resource import DEFAULT_BROKER_CAPACITY
from .resource import load_vector
from .resource import Resource
from kafka_goal_optimizer.util.error import InvalidConfigurationError


_log = logging.getLogger(__name__)


class SnapshotLoadMeasurer(LoadMeasurer):
    """LoadMeasurer reading the measured load of each partition from the
    snapshot.

    :param leader_loads: dict (topic, partition): leader load vector
    :param follower_loads: dict (topic, partition): follower load vector, for
        the partitions whose follower load was measured.
    """

    def __init__(
        self,
        leader_loads: dict[tuple[str, int], dict[Resource, float]],
        follower_loads: dict[tuple[str, int], dict[Resource, float]] | None = None,
    ) -> None:
        self.leader_loads = leader_loads
        self.follower_loads = follower_loads or {}

    def get_leader_load(self, partition_name):
        return self.leader_loads.get(partition_name, load_vector())

    def get_follower_load(self, partition_name):
        if partition_name in self.follower_loads:
            return self.follower_loads[partition_name]
        return super().get_follower_load(partition_name)


def load_snapshot(path: str) -> ClusterModel:
    """Read the snapshot file at path and build the cluster model."""
    _log.debug("Loading cluster snapshot from %s", path)
    try:
        with open(path) as snapshot_file:
            snapshot = json.load(snapshot_file)
    except OSError as e:
        raise InvalidSnapshotError(f"Cannot read snapshot {path}: {e}")
    except ValueError as e:
        raise InvalidSnapshotError(f"Snapshot {path} is not valid json: {e}")
    return cluster_model_from_snapshot(snapshot)


def cluster_model_from_snapshot(snapshot: dict[str, Any]) -> ClusterModel:
    """Build a ClusterModel from a decoded snapshot document.

    :raises: InvalidSnapshotError if the document is malformed.
    """
    if not isinstance(snapshot, dict):
        raise InvalidSnapshotError("Snapshot must be a json object")
    try:
        brokers = _parse_brokers(snapshot['brokers'])
        assignment, leader_loads, follower_loads = _parse_partitions(
            snapshot['partitions'],
        )
    except KeyError as e:
        raise InvalidSnapshotError(f"Missing key {e} in snapshot")
    except (TypeError, ValueError, InvalidConfigurationError) as e:
        raise InvalidSnapshotError(f"Malformed snapshot: {e}")
    return ClusterModel(
        assignment,
        brokers,
        SnapshotLoadMeasurer(leader_loads, follower_loads),
    )


def _parse_brokers(broker_list: list[dict[str, Any]]) -> dict[int, dict[str, Any]]:
    brokers = {}
    for broker in broker_list:
        broker_id = int(broker['id'])
        if broker_id in brokers:
            raise InvalidSnapshotError(f"Duplicate broker {broker_id} in snapshot")
        brokers[broker_id] = {
            'rack': broker.get('rack'),
            'alive': bool(broker.get('alive', True)),
            'capacity': load_vector(
                broker['capacity'],
                default=DEFAULT_BROKER_CAPACITY,
            ) if broker.get('capacity') else None,
        }
    return brokers


def _parse_partitions(partition_list: list[dict[str, Any]]) -> tuple[
    dict[tuple[str, int], list[int]],
    dict[tuple[str, int], dict[Resource, float]],
    dict[tuple[str, int], dict[Resource, float]],
]:
    assignment = {}
    leader_loads = {}
    follower_loads = {}
    for partition in partition_list:
        name = (str(partition['topic']), int(partition['partition']))
        if name in assignment:
            raise InvalidSnapshotError(f"Duplicate partition {name} in snapshot")
        replicas = [int(broker_id) for broker_id in partition['replicas']]
        if not replicas:
            raise InvalidSnapshotError(f"Partition {name} has no replicas")
        if len(set(replicas)) != len(replicas):
            raise InvalidSnapshotError(
                f"Partition {name} has duplicate replicas {replicas}",
            )
        assignment[name] = replicas
        leader_loads[name] = load_vector(partition.get('load'))
        if 'follower_load' in partition:
            follower_loads[name] = load_vector(partition['follower_load'])
    return assignment, leader_loads, follower_loads
