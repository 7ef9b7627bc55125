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

from typing import NamedTuple

from .resource import Resource


class ReplicaMovement(NamedTuple):
    """A single step of an optimization plan: the replica of partition
    hosted on source_broker_id moves to destination_broker_id, taking its
    load with it.

    :param partition: (topic, partition) name of the moved replica
    :param source_broker_id: broker the replica leaves
    :param destination_broker_id: broker the replica lands on
    :param is_leader: whether the moved replica is the partition leader
    :param load: load vector moving with the replica
    """
    partition: tuple[str, int]
    source_broker_id: int
    destination_broker_id: int
    is_leader: bool
    load: dict[Resource, float]

    def to_dict(self) -> dict:
        return {
            'topic': self.partition[0],
            'partition': self.partition[1],
            'source_broker': self.source_broker_id,
            'destination_broker': self.destination_broker_id,
            'leader': self.is_leader,
            'load': {resource.key: value for resource, value in self.load.items()},
        }

    def __str__(self) -> str:
        return "{topic}-{partition}: {source} -> {dest}".format(
            topic=self.partition[0],
            partition=self.partition[1],
            source=self.source_broker_id,
            dest=self.destination_broker_id,
        )
