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
from kafka_goal_optimizer.analyzer.goal_optimizer import GoalReport
from kafka_goal_optimizer.cluster_model.display import display_cluster_model_stats
from kafka_goal_optimizer.cluster_model.display import display_goal_report
from kafka_goal_optimizer.cluster_model.display import display_table
from kafka_goal_optimizer.cluster_model.display import format_disk


def test_format_disk():
    assert format_disk(1000) == '1 GB'


def test_display_table(capsys):
    display_table(['Broker', 'Replicas'], [[1, 10], [22, 3]])

    out, _ = capsys.readouterr()
    assert out.splitlines() == [
        'Broker | Replicas',
        '-------+---------',
        '1      | 10      ',
        '22     | 3       ',
    ]


def test_display_cluster_model_stats(capsys, create_cluster_model):
    cm = create_cluster_model()
    base_assignment = cm.assignment
    cm.relocate_replica(('T2', 0), 2, 5)

    display_cluster_model_stats(cm, base_assignment)

    out, _ = capsys.readouterr()
    assert 'Before Mean' in out
    assert 'After Mean' in out
    assert 'Total replica movements: 1' in out
    assert 'Total replica movement size: 4 GB' in out
    assert 'Total leader changes: 1' in out


def test_display_cluster_model_stats_without_base(capsys, create_cluster_model):
    display_cluster_model_stats(create_cluster_model())

    out, _ = capsys.readouterr()
    assert 'potential_nw_out' in out
    assert 'Total replica movements' not in out


def test_display_goal_report(capsys):
    display_goal_report([
        GoalReport(1, 'RackAwareGoal', True, True, 3, 3.0, 0.0),
        GoalReport(2, 'ReplicaDistributionGoal', False, False, 0, 1.5, 1.5),
    ])

    out, _ = capsys.readouterr()
    lines = out.splitlines()
    assert len(lines) == 4
    assert lines[2].startswith('1        | RackAwareGoal')
    assert 'soft' in lines[3]
    assert '1.5000' in lines[3]
