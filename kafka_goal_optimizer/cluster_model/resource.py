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
"""Resources consumed by replicas on a broker.

Every replica carries a load vector over these resources and every broker
has a capacity for each of them. The number of replicas per broker is
balanced as well, but it is a plain count bounded by
``BalancingConstraint.max_replicas_per_broker`` rather than a load.
"""
from __future__ import annotations

from enum import Enum

from kafka_goal_optimizer.util.error import InvalidConfigurationError


# Loads and utilizations closer than this are considered equal.
EPSILON = 1e-9


class Resource(Enum):
    CPU = 'cpu'
    DISK = 'disk'
    NW_IN = 'network_inbound'
    NW_OUT = 'network_outbound'

    @property
    def key(self) -> str:
        """Name used for the resource in configuration and snapshots."""
        return self.value

    @classmethod
    def from_name(cls, name: str) -> Resource:
        """Parse a configuration key (``cpu``, ``disk``, ...) or a member name."""
        for resource in cls:
            if name in (resource.value, resource.name):
                return resource
        raise InvalidConfigurationError(
            "Unknown resource {name}. Expected one of {keys}".format(
                name=name,
                keys=', '.join(r.value for r in cls),
            )
        )

    def __str__(self) -> str:
        return self.value


# Capacity of a broker for every resource the snapshot does not specify.
# CPU is in percent of all cores, disk in MB, network in KB/s.
DEFAULT_BROKER_CAPACITY = {
    Resource.CPU: 100.0,
    Resource.DISK: 500000.0,
    Resource.NW_IN: 50000.0,
    Resource.NW_OUT: 50000.0,
}


def load_vector(
    values: dict[str, float] | dict[Resource, float] | None = None,
    default: dict[Resource, float] | None = None,
) -> dict[Resource, float]:
    """Return a complete vector over all resources.

    Keys may be Resource members or their configuration names. Missing
    resources take their value from default, or 0.
    """
    vector = {resource: (default or {}).get(resource, 0.0) for resource in Resource}
    for key, value in (values or {}).items():
        resource = key if isinstance(key, Resource) else Resource.from_name(key)
        vector[resource] = float(value)
    return vector
