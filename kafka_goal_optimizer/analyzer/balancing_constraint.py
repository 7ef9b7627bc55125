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

import numbers
from typing import Any
from typing import TYPE_CHECKING

from kafka_goal_optimizer.cluster_model.resource import EPSILON
from kafka_goal_optimizer.cluster_model.resource import Resource
from kafka_goal_optimizer.util.error import InvalidConfigurationError

if TYPE_CHECKING:
    from kafka_goal_optimizer.cluster_model.broker import Broker


DEFAULT_CAPACITY_THRESHOLD = 0.8
DEFAULT_BALANCE_PERCENTAGE = 0.1
DEFAULT_MAX_REPLICAS_PER_BROKER = 10000


class BalancingConstraint:
    """Thresholds shared by every goal of an optimization run.

    Read-only once built, so a single instance can be shared by runs
    working on different cluster model copies.

    :param capacity_threshold: fraction of the broker capacity above which a
        capacity goal is violated. Either one value for every resource or a
        dict resource: value. Values lie in (0, 1].
    :param balance_percentage: allowed deviation from the cluster average for
        distribution goals, as a fraction (0.1 is 10%).
    :param max_replicas_per_broker: maximum number of replicas a broker may
        host.
    """

    def __init__(
        self,
        capacity_threshold: float | dict[Any, float] = DEFAULT_CAPACITY_THRESHOLD,
        balance_percentage: float = DEFAULT_BALANCE_PERCENTAGE,
        max_replicas_per_broker: int = DEFAULT_MAX_REPLICAS_PER_BROKER,
    ) -> None:
        self._capacity_threshold = self._parse_capacity_threshold(capacity_threshold)
        if not _is_number(balance_percentage) or balance_percentage <= 0:
            raise InvalidConfigurationError(
                f"balance_percentage must be a positive number, got {balance_percentage!r}",
            )
        self._balance_percentage = float(balance_percentage)
        if (
            isinstance(max_replicas_per_broker, bool) or
            not isinstance(max_replicas_per_broker, int) or
            max_replicas_per_broker <= 0
        ):
            raise InvalidConfigurationError(
                "max_replicas_per_broker must be a positive integer, got "
                "{value!r}".format(value=max_replicas_per_broker),
            )
        self._max_replicas_per_broker = max_replicas_per_broker

    @staticmethod
    def _parse_capacity_threshold(capacity_threshold: float | dict[Any, float]) -> dict[Resource, float]:
        if isinstance(capacity_threshold, dict):
            thresholds = {resource: DEFAULT_CAPACITY_THRESHOLD for resource in Resource}
            for key, value in capacity_threshold.items():
                resource = key if isinstance(key, Resource) else Resource.from_name(key)
                thresholds[resource] = value
        else:
            thresholds = {resource: capacity_threshold for resource in Resource}
        for resource, value in thresholds.items():
            if not _is_number(value) or not 0 < value <= 1:
                raise InvalidConfigurationError(
                    "capacity_threshold for {resource} must be in (0, 1], "
                    "got {value!r}".format(resource=resource, value=value),
                )
        return {resource: float(value) for resource, value in thresholds.items()}

    @classmethod
    def from_config(cls, config: dict[str, Any] | None) -> BalancingConstraint:
        """Build the constraint from the balancing_constraint section of the
        configuration. Missing keys take the default values.
        """
        config = config or {}
        unknown = set(config) - {
            'capacity_threshold',
            'balance_percentage',
            'max_replicas_per_broker',
        }
        if unknown:
            raise InvalidConfigurationError(
                "Unknown balancing_constraint options: {}".format(
                    ', '.join(sorted(unknown)),
                )
            )
        return cls(
            capacity_threshold=config.get('capacity_threshold', DEFAULT_CAPACITY_THRESHOLD),
            balance_percentage=config.get('balance_percentage', DEFAULT_BALANCE_PERCENTAGE),
            max_replicas_per_broker=config.get(
                'max_replicas_per_broker',
                DEFAULT_MAX_REPLICAS_PER_BROKER,
            ),
        )

    @property
    def balance_percentage(self) -> float:
        return self._balance_percentage

    @property
    def max_replicas_per_broker(self) -> int:
        return self._max_replicas_per_broker

    def capacity_threshold(self, resource: Resource) -> float:
        return self._capacity_threshold[resource]

    def capacity_limit(self, broker: Broker, resource: Resource) -> float:
        """Highest load of resource the broker may carry."""
        return broker.capacity[resource] * self._capacity_threshold[resource]

    def exceeds_capacity_threshold(self, broker: Broker, resource: Resource) -> bool:
        return broker.load(resource) > self.capacity_limit(broker, resource) + EPSILON

    def balance_limits(self, average: float) -> tuple[float, float]:
        """Window of values considered balanced around average."""
        return (
            average * (1 - self._balance_percentage),
            average * (1 + self._balance_percentage),
        )

    def _key(self) -> tuple:
        return (
            tuple(self._capacity_threshold[resource] for resource in Resource),
            self._balance_percentage,
            self._max_replicas_per_broker,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BalancingConstraint):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            "BalancingConstraint(capacity_threshold={thresholds}, "
            "balance_percentage={bp}, max_replicas_per_broker={max_replicas})".format(
                thresholds={str(r): v for r, v in self._capacity_threshold.items()},
                bp=self._balance_percentage,
                max_replicas=self._max_replicas_per_broker,
            )
        )


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)
