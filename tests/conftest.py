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
import pytest

from .helper import broker_range
from .helper import build_model
from .helper import load
from kafka_goal_optimizer.analyzer.balancing_constraint import BalancingConstraint


@pytest.fixture
def default_assignment():
    return {
        ('T0', 0): [0, 1],
        ('T0', 1): [1, 2],
        ('T1', 0): [0, 1, 2],
        ('T1', 1): [3, 4, 5],
        ('T2', 0): [2],
    }


@pytest.fixture
def default_brokers():
    # Racks r0: 0, 3; r1: 1, 4; r2: 2, 5
    return broker_range(6, racks=3)


@pytest.fixture
def default_leader_loads():
    return {
        ('T0', 0): load(cpu=4.0, disk=1000.0, nw_in=100.0, nw_out=200.0),
        ('T0', 1): load(cpu=2.0, disk=3000.0, nw_in=50.0, nw_out=100.0),
        ('T1', 0): load(cpu=6.0, disk=500.0, nw_in=300.0, nw_out=600.0),
        ('T1', 1): load(cpu=1.0, disk=2000.0, nw_in=10.0, nw_out=20.0),
        ('T2', 0): load(cpu=8.0, disk=4000.0, nw_in=400.0, nw_out=800.0),
    }


@pytest.fixture
def create_cluster_model(default_assignment, default_brokers, default_leader_loads):
    """Fixture to create a ClusterModel, the default cluster unless
    assignment or brokers are given.
    """
    def build_cluster_model(assignment=None, brokers=None, leader_loads=None):
        return build_model(
            assignment or default_assignment,
            brokers or default_brokers,
            leader_loads if leader_loads is not None else default_leader_loads,
        )

    return build_cluster_model


@pytest.fixture
def constraint():
    return BalancingConstraint()
