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
import os
from typing import Any
from typing import Union

import yaml
from typing_extensions import TypedDict

from kafka_goal_optimizer.util.error import InvalidConfigurationError
from kafka_goal_optimizer.util.error import MissingConfigurationError


class BalancingConstraintDict(TypedDict, total=False):
    capacity_threshold: Union[float, dict[str, float]]
    balance_percentage: float
    max_replicas_per_broker: int


class OptimizerConfigurationDict(TypedDict, total=False):
    balancing_constraint: BalancingConstraintDict
    goals: dict[int, str]


def load_yaml_config(config_path: str) -> Any:
    with open(config_path) as config_file:
        return yaml.safe_load(config_file)


class OptimizerConfiguration:
    """Optimizer configuration: balancing constraint and goal priorities.

    Example config file:
    .. code-block:: yaml

       balancing_constraint:
         capacity_threshold:
           cpu: 0.7
           disk: 0.8
         balance_percentage: 0.1
         max_replicas_per_broker: 2000
       goals:
         1: RackAwareGoal
         2: ReplicaCapacityGoal
         3: DiskCapacityGoal
         4: ReplicaDistributionGoal

    Both sections are optional. Without goals the default priority list is
    used by the caller.

    :param config_path: path of the yaml configuration file
    :type config_path: string
    """

    def __init__(self, config_path: str) -> None:
        self.config_path = config_path
        self.log = logging.getLogger(self.__class__.__name__)
        self.balancing_constraint: BalancingConstraintDict = {}
        self.goals: dict[int, str] | None = None
        self.load_config()

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, OptimizerConfiguration)
        if all([
            self.balancing_constraint == other.balancing_constraint,
            self.goals == other.goals,
        ]):
            return True
        return False

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def load_config(self) -> None:
        """Load the optimizer configuration"""
        self.log.debug("Loading configuration from %s", self.config_path)
        if not os.path.isfile(self.config_path):
            raise MissingConfigurationError(
                f"Configuration {self.config_path} does not exist",
            )
        try:
            config = load_yaml_config(self.config_path)
        except yaml.YAMLError:
            self.log.exception("Invalid configuration file")
            raise InvalidConfigurationError(
                f"Invalid configuration file {self.config_path}",
            )
        self.log.debug("Optimizer configuration %s", config)
        if config is None:
            return
        if not isinstance(config, dict):
            raise InvalidConfigurationError(
                f"Invalid configuration file {self.config_path}",
            )
        unknown = set(config) - {'balancing_constraint', 'goals'}
        if unknown:
            raise InvalidConfigurationError(
                "Unknown sections {sections} in {path}".format(
                    sections=', '.join(sorted(str(key) for key in unknown)),
                    path=self.config_path,
                )
            )
        balancing_constraint = config.get('balancing_constraint') or {}
        if not isinstance(balancing_constraint, dict):
            raise InvalidConfigurationError("balancing_constraint must be a mapping")
        self.balancing_constraint = balancing_constraint
        if 'goals' in config:
            self.goals = self._parse_goals(config['goals'])

    def _parse_goals(self, goals: Any) -> dict[int, str]:
        if not isinstance(goals, dict) or not goals:
            raise InvalidConfigurationError("goals must be a non-empty mapping priority: goal")
        parsed = {}
        for priority, name in goals.items():
            try:
                priority = int(priority)
            except (TypeError, ValueError):
                raise InvalidConfigurationError(
                    f"Goal priority must be an integer, got {priority!r}",
                )
            if priority in parsed:
                raise InvalidConfigurationError(f"Duplicate goal priority {priority}")
            if not isinstance(name, str):
                raise InvalidConfigurationError(
                    f"Goal name for priority {priority} must be a string",
                )
            parsed[priority] = name
        return parsed
