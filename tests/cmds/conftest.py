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
import json
from unittest import mock

from pytest import fixture


@fixture
def snapshot():
    # Broker 5 is dead. Racks r0: 0, 3; r1: 1, 4; r2: 2, 5
    load = {'cpu': 1.0, 'disk': 1000.0, 'network_inbound': 10.0, 'network_outbound': 20.0}
    return {
        'brokers': [
            {'id': i, 'rack': f'r{i % 3}', 'alive': i != 5}
            for i in range(6)
        ],
        'partitions': [
            {'topic': 't0', 'partition': 0, 'replicas': [0, 1, 2], 'load': load},
            {'topic': 't0', 'partition': 1, 'replicas': [5, 0, 1], 'load': load},
            {'topic': 't0', 'partition': 2, 'replicas': [3, 4, 5], 'load': load},
            {'topic': 't1', 'partition': 0, 'replicas': [1, 2], 'load': load},
            {'topic': 't1', 'partition': 1, 'replicas': [5, 3], 'load': load},
        ],
    }


@fixture
def snapshot_path(tmpdir, snapshot):
    path = tmpdir.join('snapshot.json')
    path.write(json.dumps(snapshot))
    return str(path)


@fixture
def write_config(tmpdir):
    def _write_config(content):
        path = tmpdir.join('config.yaml')
        path.write(content)
        return str(path)

    return _write_config


@fixture(autouse=True)
def mock_logging_config():
    with mock.patch('kafka_goal_optimizer.main.configure_logging', autospec=True) as mock_config:
        yield mock_config
