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

from .error import InvalidLoadError
from .resource import load_vector
from .resource import Resource

if TYPE_CHECKING:
    from .broker import Broker
    from .partition import Partition


class Replica:
    """One copy of a partition, hosted on exactly one broker at a time.

    The hosting broker is only changed by the ClusterModel, which keeps the
    broker aggregates in sync with the move.
    """

    def __init__(
        self,
        partition: Partition,
        broker: Broker,
        is_leader: bool = False,
        load: dict[Resource, float] | None = None,
    ) -> None:
        self._partition = partition
        self._broker = broker
        self._is_leader = is_leader
        self._load = load_vector(load)
        negative = [r for r, value in self._load.items() if value < 0]
        if negative:
            raise InvalidLoadError(
                "Replica of {pname} on broker {broker} assigned negative "
                "load for {resources}".format(
                    pname=partition.name,
                    broker=broker.id,
                    resources=', '.join(str(r) for r in negative),
                )
            )

    @property
    def partition(self) -> Partition:
        return self._partition

    @property
    def broker(self) -> Broker:
        return self._broker

    @property
    def is_leader(self) -> bool:
        return self._is_leader

    @property
    def topic(self):
        return self._partition.topic

    @property
    def load(self) -> dict[Resource, float]:
        """Load vector of the replica. Callers must not mutate it."""
        return self._load

    def _set_broker(self, broker: Broker) -> None:
        self._broker = broker

    def __str__(self) -> str:
        return "{name}@{broker}".format(
            name=self._partition.name,
            broker=self._broker.id,
        )

    def __repr__(self) -> str:
        return f"{self}"
