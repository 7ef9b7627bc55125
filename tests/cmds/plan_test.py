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

from pytest import raises

from kafka_goal_optimizer.main import run


INFEASIBLE_CONFIG = """
balancing_constraint:
  max_replicas_per_broker: 1
"""


def test_plan(capsys, tmpdir, snapshot_path):
    plan_path = str(tmpdir.join('plan.json'))

    run(['plan', '--snapshot', snapshot_path, '--write-to-file', plan_path])

    out, _ = capsys.readouterr()
    assert 'RackAwareGoal' in out
    assert 'Total replica movements' in out
    with open(plan_path) as plan_file:
        plan = json.load(plan_file)
    assert plan['version'] == 1
    moved = {(p['topic'], p['partition']) for p in plan['partitions']}
    assert {('t0', 1), ('t0', 2), ('t1', 1)} <= moved
    assert not any(5 in p['replicas'] for p in plan['partitions'])


def test_plan_show_movements(capsys, snapshot_path, write_config):
    config_path = write_config('goals:\n  1: RackAwareGoal\n')

    run(['plan', '--snapshot', snapshot_path, '--config', config_path, '--show-movements'])

    out, _ = capsys.readouterr()
    movements = json.loads(out[out.index('\n[') + 1:])
    assert len(movements) == 3
    assert all(m['source_broker'] == 5 for m in movements)
    assert 'ReplicaDistributionGoal' not in out


def test_plan_exclude_brokers(tmpdir, snapshot_path, write_config):
    config_path = write_config('goals:\n  1: RackAwareGoal\n')
    plan_path = str(tmpdir.join('plan.json'))

    run([
        'plan',
        '--snapshot', snapshot_path,
        '--config', config_path,
        '--exclude-brokers', '4',
        '--write-to-file', plan_path,
    ])

    with open(plan_path) as plan_file:
        plan = json.load(plan_file)
    assert not any(4 in p['replicas'] for p in plan['partitions'] if p['topic'] == 't1')


def test_plan_infeasible(snapshot_path, write_config):
    config_path = write_config(INFEASIBLE_CONFIG)

    with raises(SystemExit) as e:
        run(['plan', '--snapshot', snapshot_path, '--config', config_path])

    assert e.value.code == 1


def test_plan_unknown_goal(snapshot_path, write_config):
    config_path = write_config('goals:\n  1: LeaderReplicaDistributionGoal\n')

    with raises(SystemExit) as e:
        run(['plan', '--snapshot', snapshot_path, '--config', config_path])

    assert e.value.code == 1


def test_plan_missing_snapshot(tmpdir):
    with raises(SystemExit) as e:
        run(['plan', '--snapshot', str(tmpdir.join('missing.json'))])

    assert e.value.code == 1


def test_plan_empty_cluster(capsys, tmpdir):
    path = tmpdir.join('snapshot.json')
    path.write(json.dumps({'brokers': [{'id': 0}], 'partitions': []}))

    run(['plan', '--snapshot', str(path)])

    out, _ = capsys.readouterr()
    assert out == ''
