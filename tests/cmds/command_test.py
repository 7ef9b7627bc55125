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

from pytest import raises

from kafka_goal_optimizer.cmds.command import GoalOptimizerCmd
from kafka_goal_optimizer.main import parse_args


def test_parse_args_plan():
    args = parse_args(['plan', '--snapshot', 'snapshot.json', '--exclude-brokers', '1,2'])

    assert args.subcommand == 'plan'
    assert args.snapshot == 'snapshot.json'
    assert args.exclude_brokers == [1, 2]
    assert args.config is None
    assert args.proposed_plan_file is None


def test_parse_args_requires_subcommand():
    with raises(SystemExit):
        parse_args([])


def test_parse_args_requires_snapshot():
    with raises(SystemExit):
        parse_args(['verify'])


def test_write_json_plan(tmpdir):
    path = tmpdir.join('plan.json')

    GoalOptimizerCmd().write_json_plan({'version': 1, 'partitions': []}, str(path))

    assert path.read() == '{"version": 1, "partitions": []}'


def test_run_uses_configured_goals(snapshot_path, write_config):
    config_path = write_config(
        'balancing_constraint:\n'
        '  balance_percentage: 0.2\n'
        'goals:\n'
        '  1: RackAwareGoal\n',
    )
    cmd = GoalOptimizerCmd()
    args = parse_args(['verify', '--snapshot', snapshot_path, '--config', config_path])

    with mock.patch.object(cmd, 'run_command', autospec=True) as mock_run_command:
        cmd.run(args)

    assert cmd.goals == {1: 'RackAwareGoal'}
    assert cmd.constraint.balance_percentage == 0.2
    assert len(mock_run_command.call_args[0][0].partitions) == 5
