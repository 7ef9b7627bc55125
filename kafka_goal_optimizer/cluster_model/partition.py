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

from typing import TYPE_CHECKING

from .resource import Resource
from .topic import Topic

if TYPE_CHECKING:
    from .broker import Broker
    from .rack import Rack
    from .replica import Replica


class Partition:
    """Class representing the partition object.
    It contains topic-partition_id tuple as name, topic and replicas
    (ordered list of Replica objects, the leader being flagged on the replica).
    """

    def __init__(self, topic: Topic, id: int) -> None:
        # Every partition name has (topic, partition) tuple
        self._name = (topic.id, id)
        self._replicas: list[Replica] = []
        self._topic = topic

    @property
    def name(self) -> tuple[str, int]:
        """Name of partition, consisting of (topic_id, partition_id) tuple."""
        return self._name

    @property
    def partition_id(self) -> int:
        """Partition id component of the partition-tuple."""
        return int(self._name[1])

    @property
    def topic(self) -> Topic:
        return self._topic

    @property
    def replicas(self) -> list[Replica]:
        """List of replicas of the partition. The order never changes during
        an optimization run.
        """
        return self._replicas

    @property
    def replication_factor(self) -> int:
        return len(self._replicas)

    @property
    def leader(self) -> Replica | None:
        """Leader replica for the partition."""
        for replica in self._replicas:
            if replica.is_leader:
                return replica
        return None

    @property
    def followers(self) -> list[Replica]:
        return [replica for replica in self._replicas if not replica.is_leader]

    @property
    def brokers(self) -> list[Broker]:
        """Brokers hosting the replicas, in replica order."""
        return [replica.broker for replica in self._replicas]

    @property
    def racks(self) -> list[Rack | None]:
        """Racks hosting the replicas, in replica order. Racks show up more
        than once if the partition is not rack aware.
        """
        return [replica.broker.rack for replica in self._replicas]

    def add_replica(self, replica: Replica) -> None:
        """Add replica to existing list of replicas."""
        self._replicas.append(replica)

    def replica_on(self, broker: Broker) -> Replica | None:
        """Return the replica hosted on broker, if any."""
        for replica in self._replicas:
            if replica.broker is broker:
                return replica
        return None

    def leader_load(self, resource: Resource) -> float:
        """Load the partition puts on a broker for resource when the broker
        leads it.
        """
        leader = self.leader
        if leader is None:
            return 0.0
        return leader.load[resource]

    def __str__(self) -> str:
        return f"{self._name}"

    def __repr__(self) -> str:
        return f"{self}"
