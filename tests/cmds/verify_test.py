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
from pytest import raises

from .plan_test import INFEASIBLE_CONFIG
from kafka_goal_optimizer.main import run


def test_verify(capsys, snapshot_path):
    run(['verify', '--snapshot', snapshot_path])

    out, _ = capsys.readouterr()
    assert out == 'Optimization verified: the goals improve the cluster.\n'


def test_verify_infeasible(capsys, snapshot_path, write_config):
    config_path = write_config(INFEASIBLE_CONFIG)

    with raises(SystemExit) as e:
        run(['verify', '--snapshot', snapshot_path, '--config', config_path])

    out, _ = capsys.readouterr()
    assert e.value.code == 1
    assert out == 'Optimization failed to improve the cluster.\n'
