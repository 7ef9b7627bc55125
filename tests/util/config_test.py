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
from unittest import mock

import pytest
import yaml

from kafka_goal_optimizer.util.config import load_yaml_config
from kafka_goal_optimizer.util.config import OptimizerConfiguration
from kafka_goal_optimizer.util.error import InvalidConfigurationError
from kafka_goal_optimizer.util.error import MissingConfigurationError


MOCK_CONFIG = """
---
  balancing_constraint:
    capacity_threshold:
      cpu: 0.7
      disk: 0.8
    balance_percentage: 0.05
    max_replicas_per_broker: 2000
  goals:
    1: RackAwareGoal
    2: DiskCapacityGoal
    3: ReplicaDistributionGoal
"""


def test_load_yaml_config(tmpdir):
    path = tmpdir.join('config.yaml')
    path.write(MOCK_CONFIG)

    config = load_yaml_config(str(path))

    assert config['balancing_constraint']['max_replicas_per_broker'] == 2000
    assert config['goals'][2] == 'DiskCapacityGoal'


class TestOptimizerConfiguration:

    @pytest.fixture
    def mock_yaml(self):
        with mock.patch(
            'kafka_goal_optimizer.util.config.load_yaml_config',
            autospec=True,
        ) as mock_load, mock.patch(
            'os.path.isfile',
            return_value=True,
            autospec=True,
        ):
            yield mock_load

    def test_load_config(self, mock_yaml):
        mock_yaml.return_value = yaml.safe_load(MOCK_CONFIG)

        config = OptimizerConfiguration('/etc/optimizer.yaml')

        assert config.balancing_constraint == {
            'capacity_threshold': {'cpu': 0.7, 'disk': 0.8},
            'balance_percentage': 0.05,
            'max_replicas_per_broker': 2000,
        }
        assert config.goals == {
            1: 'RackAwareGoal',
            2: 'DiskCapacityGoal',
            3: 'ReplicaDistributionGoal',
        }
        mock_yaml.assert_called_once_with('/etc/optimizer.yaml')

    def test_empty_config(self, mock_yaml):
        mock_yaml.return_value = None

        config = OptimizerConfiguration('/etc/optimizer.yaml')

        assert config.balancing_constraint == {}
        assert config.goals is None

    def test_string_priorities(self, mock_yaml):
        mock_yaml.return_value = {'goals': {'2': 'DiskCapacityGoal', '1': 'RackAwareGoal'}}

        config = OptimizerConfiguration('/etc/optimizer.yaml')

        assert config.goals == {1: 'RackAwareGoal', 2: 'DiskCapacityGoal'}

    @pytest.mark.parametrize(
        'content',
        [
            ['goals'],
            {'clusters': {}},
            {'balancing_constraint': [0.8]},
            {'goals': []},
            {'goals': {}},
            {'goals': {'first': 'RackAwareGoal'}},
            {'goals': {1: 'RackAwareGoal', '1': 'DiskCapacityGoal'}},
            {'goals': {1: 12}},
        ],
    )
    def test_invalid_config(self, mock_yaml, content):
        mock_yaml.return_value = content

        with pytest.raises(InvalidConfigurationError):
            OptimizerConfiguration('/etc/optimizer.yaml')

    def test_yaml_error(self, mock_yaml):
        mock_yaml.side_effect = yaml.YAMLError

        with pytest.raises(InvalidConfigurationError):
            OptimizerConfiguration('/etc/optimizer.yaml')

    def test_missing_config(self):
        with mock.patch('os.path.isfile', return_value=False, autospec=True):
            with pytest.raises(MissingConfigurationError):
                OptimizerConfiguration('/etc/optimizer.yaml')

    def test_eq(self, mock_yaml):
        mock_yaml.return_value = yaml.safe_load(MOCK_CONFIG)

        assert OptimizerConfiguration('/a.yaml') == OptimizerConfiguration('/b.yaml')
