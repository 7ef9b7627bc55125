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
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .broker import Broker
    from .partition import Partition
    from .replica import Replica


class Rack:
    """Represent attributes and functions specific to a rack: a failure
    domain grouping brokers. Rack awareness requires the replicas of a
    partition to live in distinct racks.
    """

    log = logging.getLogger(__name__)

    def __init__(self, id: str, brokers: set[Broker] | None = None) -> None:
        self._id = id
        if brokers and not isinstance(brokers, set):
            raise TypeError(
                f"brokers has to be a set but type is {type(brokers)}",
            )
        self._brokers = brokers or set()

    @property
    def id(self) -> str:
        """Return name of the rack."""
        return self._id

    @property
    def brokers(self) -> set[Broker]:
        """Return set of brokers."""
        return self._brokers

    @property
    def alive_brokers(self) -> set[Broker]:
        return {broker for broker in self._brokers if broker.alive}

    def add_broker(self, broker: Broker) -> None:
        """Add broker to current broker-list."""
        if broker not in self._brokers:
            self._brokers.add(broker)
        else:
            self.log.warning(
                'Broker {broker_id} already present in '
                'rack {rack_id}'.format(
                    broker_id=broker.id,
                    rack_id=self.id,
                )
            )

    @property
    def replicas(self) -> list[Replica]:
        """Evaluate and return all replicas hosted in the rack."""
        return [
            replica
            for broker in self._brokers
            for replica in broker.replicas
        ]

    def count_replica(self, partition: Partition) -> int:
        """Return count of replicas of given partition."""
        return sum(1 for broker in self._brokers if broker.hosts(partition))

    def __str__(self) -> str:
        return f"{self._id}"

    def __repr__(self) -> str:
        return f"{self}"
