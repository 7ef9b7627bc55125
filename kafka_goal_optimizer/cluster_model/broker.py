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

import logging
import math
from collections import Counter
from typing import TYPE_CHECKING

from .error import InvalidLoadError
from .resource import DEFAULT_BROKER_CAPACITY
from .resource import load_vector
from .resource import Resource

if TYPE_CHECKING:
    from .partition import Partition
    from .rack import Rack
    from .replica import Replica
    from .topic import Topic


class Broker:
    """Represent a Kafka broker.
    A broker object contains as attributes the broker id, the capacity for
    each resource, the alive flag, the hosted replicas and the rack.

    The load of the broker is the sum of the load of its replicas and is
    recomputed every time a replica is added or removed.
    """

    log = logging.getLogger(__name__)

    def __init__(
        self,
        id: int,
        capacity: dict[Resource, float] | None = None,
        alive: bool = True,
    ) -> None:
        self._id = id
        self._capacity = load_vector(capacity, default=DEFAULT_BROKER_CAPACITY)
        invalid = [r for r, value in self._capacity.items() if value <= 0]
        if invalid:
            raise InvalidLoadError(
                "Broker {broker_id} has non-positive capacity for {resources}".format(
                    broker_id=id,
                    resources=', '.join(str(r) for r in invalid),
                )
            )
        self._alive = alive
        self._rack: Rack | None = None
        self._replicas: dict[Partition, Replica] = {}
        self._load = load_vector()
        self._potential_nw_out = 0.0
        self._topic_replica_count: Counter[Topic] = Counter()

    @property
    def id(self) -> int:
        return self._id

    @property
    def capacity(self) -> dict[Resource, float]:
        return self._capacity

    @property
    def alive(self) -> bool:
        return self._alive

    def mark_dead(self) -> None:
        """Mark a broker as dead. Dead brokers keep their replicas until an
        optimization moves them away, but never receive new ones.
        """
        self._alive = False

    @property
    def rack(self) -> Rack | None:
        return self._rack

    @rack.setter
    def rack(self, rack: Rack) -> None:
        self._rack = rack

    @property
    def replicas(self) -> list[Replica]:
        """Replicas hosted on the broker, in placement order."""
        return list(self._replicas.values())

    @property
    def partitions(self) -> set[Partition]:
        return set(self._replicas)

    @property
    def replica_count(self) -> int:
        return len(self._replicas)

    @property
    def leader_count(self) -> int:
        return sum(1 for replica in self._replicas.values() if replica.is_leader)

    @property
    def topics(self) -> set[Topic]:
        """Return the set of topics current in broker."""
        return set(self._topic_replica_count)

    @property
    def potential_nw_out(self) -> float:
        """Outbound network load of the broker if it led every partition it
        hosts.
        """
        return self._potential_nw_out

    def load(self, resource: Resource) -> float:
        return self._load[resource]

    def utilization(self, resource: Resource) -> float:
        """Load of resource as a fraction of the broker capacity."""
        return self._load[resource] / self._capacity[resource]

    def count_replicas(self, topic: Topic) -> int:
        """Return count of replicas for given topic."""
        return self._topic_replica_count[topic]

    def hosts(self, partition: Partition) -> bool:
        return partition in self._replicas

    def replica_for(self, partition: Partition) -> Replica | None:
        return self._replicas.get(partition)

    def empty(self) -> bool:
        """Return true if the broker has no replicas assigned"""
        return len(self._replicas) == 0

    def add_replica(self, replica: Replica) -> None:
        """Add replica to the broker and refresh the aggregated load."""
        assert replica.partition not in self._replicas
        self._replicas[replica.partition] = replica
        self._topic_replica_count[replica.topic] += 1
        self._update_load()

    def remove_replica(self, replica: Replica) -> None:
        """Remove replica from the broker and refresh the aggregated load."""
        if self._replicas.get(replica.partition) is not replica:
            raise ValueError(
                'Replica of {topic_id}:{partition_id} not found in broker '
                '{broker_id}'.format(
                    topic_id=replica.partition.topic.id,
                    partition_id=replica.partition.partition_id,
                    broker_id=self._id,
                )
            )
        del self._replicas[replica.partition]
        self._topic_replica_count[replica.topic] -= 1
        if not self._topic_replica_count[replica.topic]:
            del self._topic_replica_count[replica.topic]
        self._update_load()

    def _update_load(self) -> None:
        # fsum keeps the aggregate exact, independent of the move history
        for resource in Resource:
            self._load[resource] = math.fsum(
                replica.load[resource] for replica in self._replicas.values()
            )
        self._potential_nw_out = math.fsum(
            partition.leader_load(Resource.NW_OUT) for partition in self._replicas
        )

    def __str__(self) -> str:
        return f"{self._id}"

    def __repr__(self) -> str:
        return f"{self}"
