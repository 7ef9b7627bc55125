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
from collections import OrderedDict
from typing import Any
from typing import Callable

from .broker import Broker
from .error import InvalidBrokerIdError
from .error import InvalidPartitionError
from .error import InvalidRelocationError
from .load_measurer import LoadMeasurer
from .movement import ReplicaMovement
from .partition import Partition
from .rack import Rack
from .replica import Replica
from .resource import Resource
from .topic import Topic


def default_extract_rack(broker_id: int, metadata: dict[str, Any] | None) -> str | None:
    """Read the rack from the broker metadata."""
    if not metadata:
        return None
    return metadata.get('rack')


class ClusterModel:
    """Represent a Kafka cluster as the optimizer sees it: brokers grouped in
    racks, topics, partitions and the replicas placed on the brokers.

    The model is mutated in place during an optimization run and is not safe
    for concurrent use. Parallel runs must work on their own copy().

        :param assignment: cluster assignment is a dict (topic, partition): replicas
            (list of broker ids, the first one being the leader)
        :param brokers: dict representing the brokers of the cluster
            broker_id: metadata. Recognized metadata keys are 'rack',
            'alive' (default True) and 'capacity' (resource name: capacity).
        :param load_measurer: Instance of LoadMeasurer used to assign a load
            vector to each replica.
        :param extract_rack: function used to extract the rack id from the
            broker id and metadata. Brokers without a rack are placed in a rack
            of their own.
    """

    def __init__(
        self,
        assignment: dict[tuple[str, int], list[int]],
        brokers: dict[int, dict[str, Any] | None],
        load_measurer: LoadMeasurer,
        extract_rack: Callable[[int, dict[str, Any] | None], str | None] = default_extract_rack,
    ) -> None:
        self.extract_rack = extract_rack
        self.load_measurer = load_measurer
        self.log = logging.getLogger(self.__class__.__name__)
        self.topics: dict[str, Topic] = {}
        self.racks: dict[str, Rack] = {}
        self.brokers: dict[int, Broker] = {}
        self.partitions: dict[tuple[str, int], Partition] = {}
        self._build_brokers(brokers)
        self._build_partitions(assignment)
        self.log.debug(
            'Total partitions in cluster {partitions}'.format(
                partitions=len(self.partitions),
            ),
        )
        self.log.debug(
            'Total racks in cluster {racks}'.format(
                racks=len(self.racks),
            ),
        )
        self.log.debug(
            'Total brokers in cluster {brokers}, dead {dead}'.format(
                brokers=len(self.brokers),
                dead=len(self.dead_brokers()),
            ),
        )

    def _build_brokers(self, brokers: dict[int, dict[str, Any] | None]) -> None:
        """Build broker objects using broker-ids."""
        for broker_id, metadata in brokers.items():
            self.brokers[broker_id] = self._create_broker(broker_id, metadata)

    def _create_broker(self, broker_id: int, metadata: dict[str, Any] | None = None) -> Broker:
        """Create a broker object and assign it to a rack.
        A broker object with no metadata is considered dead.
        """
        broker = Broker(
            broker_id,
            capacity=metadata.get('capacity') if metadata else None,
            alive=bool(metadata) and metadata.get('alive', True),
        )
        rack_id = self.extract_rack(broker_id, metadata)
        if rack_id is None:
            rack_id = str(broker_id)
        rack = self.racks.setdefault(rack_id, Rack(rack_id))
        rack.add_broker(broker)
        broker.rack = rack
        return broker

    def _build_partitions(self, assignment: dict[tuple[str, int], list[int]]) -> None:
        """Builds all partition and replica objects and update corresponding
        broker and topic objects.
        """
        for partition_name, replica_ids in assignment.items():
            topic_id, partition_id = partition_name
            topic = self.topics.setdefault(topic_id, Topic(topic_id))
            partition = Partition(topic, partition_id)
            self.partitions[partition_name] = partition
            topic.add_partition(partition)

            for index, broker_id in enumerate(replica_ids):
                if broker_id not in self.brokers:
                    self.log.warning(
                        "Broker %s containing partition %s is not in "
                        "known brokers. Considering it dead.",
                        broker_id,
                        partition,
                    )
                    self.brokers[broker_id] = self._create_broker(broker_id)
                broker = self.brokers[broker_id]
                if broker.hosts(partition):
                    raise InvalidPartitionError(
                        "Partition {pname} has broker {broker_id} more than "
                        "once in its replicas".format(
                            pname=partition_name,
                            broker_id=broker_id,
                        )
                    )
                is_leader = index == 0
                if is_leader:
                    load = self.load_measurer.get_leader_load(partition_name)
                else:
                    load = self.load_measurer.get_follower_load(partition_name)
                replica = Replica(partition, broker, is_leader=is_leader, load=load)
                partition.add_replica(replica)
                broker.add_replica(replica)

    def is_broker_alive(self, broker_id: int) -> bool:
        return self._get_broker(broker_id).alive

    def alive_brokers(self) -> list[Broker]:
        """Alive brokers ordered by id."""
        return sorted(
            (broker for broker in self.brokers.values() if broker.alive),
            key=lambda b: b.id,
        )

    def dead_brokers(self) -> list[Broker]:
        """Dead brokers ordered by id. They must be emptied by the optimizer."""
        return sorted(
            (broker for broker in self.brokers.values() if not broker.alive),
            key=lambda b: b.id,
        )

    def brokers_sorted_by_utilization(self, resource: Resource, descending: bool = False) -> list[Broker]:
        """Brokers ordered by utilization of resource (load over capacity).
        Ties are broken by broker id, ascending in both directions.
        """
        if descending:
            return sorted(
                self.brokers.values(),
                key=lambda b: (-b.utilization(resource), b.id),
            )
        return sorted(
            self.brokers.values(),
            key=lambda b: (b.utilization(resource), b.id),
        )

    def total_load(self, resource: Resource) -> float:
        return math.fsum(broker.load(resource) for broker in self.brokers.values())

    @property
    def total_replica_count(self) -> int:
        return sum(broker.replica_count for broker in self.brokers.values())

    def alive_capacity(self, resource: Resource) -> float:
        return math.fsum(broker.capacity[resource] for broker in self.alive_brokers())

    def average_utilization(self, resource: Resource) -> float:
        """Utilization every alive broker would have if the whole cluster load
        was spread proportionally to capacity.
        """
        capacity = self.alive_capacity(resource)
        if not capacity:
            return 0.0
        return self.total_load(resource) / capacity

    def relocate_replica(
        self,
        partition_name: tuple[str, int],
        source_id: int,
        destination_id: int,
    ) -> ReplicaMovement:
        """Move the replica of partition hosted on the source broker to the
        destination broker, transferring its load.

        :raises: InvalidBrokerIdError, InvalidPartitionError for unknown ids
        :raises: InvalidRelocationError when the source does not host the
            replica, the destination is dead or already hosts a replica of
            the partition.
        """
        partition = self._get_partition(partition_name)
        source = self._get_broker(source_id)
        destination = self._get_broker(destination_id)
        replica = source.replica_for(partition)
        if replica is None:
            raise InvalidRelocationError(
                "Broker {source} does not host a replica of {pname}".format(
                    source=source_id,
                    pname=partition_name,
                )
            )
        if not destination.alive:
            raise InvalidRelocationError(
                "Cannot move {pname} to dead broker {dest}".format(
                    pname=partition_name,
                    dest=destination_id,
                )
            )
        if destination.hosts(partition):
            raise InvalidRelocationError(
                "Broker {dest} already hosts a replica of {pname}".format(
                    pname=partition_name,
                    dest=destination_id,
                )
            )
        self._place(replica, destination)
        return ReplicaMovement(
            partition_name,
            source_id,
            destination_id,
            replica.is_leader,
            dict(replica.load),
        )

    def _place(self, replica: Replica, destination: Broker) -> None:
        replica.broker.remove_replica(replica)
        replica._set_broker(destination)
        destination.add_replica(replica)

    @property
    def assignment(self) -> dict[tuple[str, int], list[int]]:
        assignment = {}
        for partition in self.partitions.values():
            assignment[partition.name] = [broker.id for broker in partition.brokers]
        # assignment map created in sorted order for deterministic solution
        return OrderedDict(sorted(list(assignment.items()), key=lambda t: t[0]))

    def restore(self, assignment: dict[tuple[str, int], list[int]]) -> None:
        """Put every replica back on the broker given by assignment.

        Used to roll back the moves of a goal. Dead brokers are valid targets
        here, since the assignment comes from an earlier state of the model.
        The whole assignment is checked before any replica moves.

        :raises: InvalidPartitionError when the assignment does not match the
            partitions or replication factors of the model, or lists a broker
            twice for a partition.
        :raises: InvalidBrokerIdError for unknown broker ids.
        """
        placements = []
        for partition_name, broker_ids in assignment.items():
            partition = self._get_partition(partition_name)
            if len(broker_ids) != partition.replication_factor:
                raise InvalidPartitionError(
                    "Replication factor of {pname} is {rf}, got {replicas}".format(
                        pname=partition_name,
                        rf=partition.replication_factor,
                        replicas=broker_ids,
                    )
                )
            if len(set(broker_ids)) != len(broker_ids):
                raise InvalidPartitionError(
                    "Duplicate brokers for {pname}: {replicas}".format(
                        pname=partition_name,
                        replicas=broker_ids,
                    )
                )
            targets = [self._get_broker(b_id) for b_id in broker_ids]
            placements.append((partition, targets))

        for partition, targets in placements:
            moving = [
                (replica, target)
                for replica, target in zip(partition.replicas, targets)
                if replica.broker is not target
            ]
            # Detach first so that swapped positions never collide on a broker
            for replica, _ in moving:
                replica.broker.remove_replica(replica)
            for replica, target in moving:
                replica._set_broker(target)
                target.add_replica(replica)

    def copy(self) -> ClusterModel:
        """Return an independent model with the same brokers, racks, loads
        and placement.
        """
        brokers = {
            broker.id: {
                'rack': broker.rack.id if broker.rack else None,
                'alive': broker.alive,
                'capacity': dict(broker.capacity),
            }
            for broker in self.brokers.values()
        }
        model = ClusterModel({}, brokers, self.load_measurer, default_extract_rack)
        for partition_name, partition in self.partitions.items():
            topic = model.topics.setdefault(partition.topic.id, Topic(partition.topic.id))
            copied = Partition(topic, partition.partition_id)
            model.partitions[partition_name] = copied
            topic.add_partition(copied)
            for replica in partition.replicas:
                broker = model.brokers[replica.broker.id]
                replica_copy = Replica(copied, broker, replica.is_leader, dict(replica.load))
                copied.add_replica(replica_copy)
                broker.add_replica(replica_copy)
        return model

    def _get_broker(self, broker_id: int) -> Broker:
        try:
            return self.brokers[broker_id]
        except KeyError:
            self.log.error("Invalid broker id %s.", broker_id)
            raise InvalidBrokerIdError(
                f"Broker id {broker_id} does not exist in cluster"
            )

    def _get_partition(self, partition_name: tuple[str, int]) -> Partition:
        try:
            return self.partitions[partition_name]
        except KeyError:
            self.log.error(
                "Invalid topic-partition %s-%s.",
                partition_name[0],
                partition_name[1],
            )
            raise InvalidPartitionError(
                "Invalid topic-partition {}-{}."
                .format(partition_name[0], partition_name[1]),
            )
