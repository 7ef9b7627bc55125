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

from ..helper import broker_range
from ..helper import build_model
from ..helper import load
from ..helper import TEST_CAPACITY
from kafka_goal_optimizer.analyzer.balancing_constraint import BalancingConstraint
from kafka_goal_optimizer.analyzer.error import OptimizationFailure
from kafka_goal_optimizer.analyzer.error import OptimizerState
from kafka_goal_optimizer.analyzer.goals import CpuCapacityGoal
from kafka_goal_optimizer.analyzer.goals import DiskCapacityGoal
from kafka_goal_optimizer.analyzer.goals import PotentialNwOutGoal
from kafka_goal_optimizer.analyzer.goals import ReplicaCapacityGoal
from kafka_goal_optimizer.cluster_model.resource import Resource


@pytest.fixture
def cpu_model():
    return build_model(
        {('T0', 0): [0], ('T0', 1): [0], ('T0', 2): [1]},
        broker_range(3),
        {
            ('T0', 0): load(cpu=30.0),
            ('T0', 1): load(cpu=25.0),
            ('T0', 2): load(cpu=10.0),
        },
    )


class TestResourceCapacityGoal:

    def test_imbalance(self, cpu_model):
        constraint = BalancingConstraint(capacity_threshold=0.5)
        goal = CpuCapacityGoal()

        assert goal.imbalance(cpu_model, constraint) == 5.0
        assert not goal.is_goal_satisfied_after_optimization(cpu_model, constraint)

    def test_accepts(self, cpu_model):
        goal = CpuCapacityGoal()
        replica = cpu_model.partitions[('T0', 0)].leader

        assert goal.accepts(
            replica,
            cpu_model.brokers[1],
            cpu_model,
            BalancingConstraint(capacity_threshold=0.5),
        )
        assert not goal.accepts(
            replica,
            cpu_model.brokers[1],
            cpu_model,
            BalancingConstraint(capacity_threshold=0.3),
        )

    def test_accepts_replica_without_load(self, cpu_model):
        # No disk load at all, the disk limit is irrelevant
        goal = DiskCapacityGoal()
        replica = cpu_model.partitions[('T0', 0)].leader

        assert goal.accepts(
            replica,
            cpu_model.brokers[1],
            cpu_model,
            BalancingConstraint(capacity_threshold=0.01),
        )

    def test_optimize(self, cpu_model):
        constraint = BalancingConstraint(capacity_threshold=0.5)
        goal = CpuCapacityGoal()

        movements = goal.optimize(cpu_model, constraint)

        # The smallest replica fixing the broker alone goes to the least
        # loaded broker
        assert [(m.partition, m.destination_broker_id) for m in movements] == [
            (('T0', 1), 2),
        ]
        assert cpu_model.brokers[0].load(Resource.CPU) == 30.0
        assert goal.is_goal_satisfied_after_optimization(cpu_model, constraint)
        assert goal.imbalance(cpu_model, constraint) == 0

    def test_optimize_respects_optimized_goals(self, cpu_model):
        constraint = BalancingConstraint(capacity_threshold=0.5)
        disk_goal = DiskCapacityGoal()

        class NoBrokerTwo(CpuCapacityGoal):
            def accepts(self, replica, destination, cluster_model, constraint):
                return destination.id != 2

        CpuCapacityGoal().optimize(
            cpu_model,
            constraint,
            optimized_goals=[disk_goal, NoBrokerTwo()],
        )

        assert cpu_model.assignment[('T0', 1)] == [1]

    def test_infeasible(self, cpu_model):
        constraint = BalancingConstraint(capacity_threshold=0.2)

        with pytest.raises(OptimizationFailure) as e:
            CpuCapacityGoal().optimize(cpu_model, constraint)

        assert e.value.state is OptimizerState.HARD_GOAL_INFEASIBLE
        assert e.value.broker_id == 0

    def test_evacuation_respects_capacity(self):
        cm = build_model(
            {('T0', 0): [2], ('T0', 1): [2], ('T0', 2): [0]},
            broker_range(3, dead=[2]),
            {
                ('T0', 0): load(cpu=30.0),
                ('T0', 1): load(cpu=20.0),
                ('T0', 2): load(cpu=25.0),
            },
        )
        constraint = BalancingConstraint(capacity_threshold=0.5)

        CpuCapacityGoal().optimize(cm, constraint)

        # Biggest first: 30 to the empty broker 1, then 20 fits on broker 0
        assert cm.assignment == {
            ('T0', 0): [1],
            ('T0', 1): [0],
            ('T0', 2): [0],
        }


class TestReplicaCapacityGoal:

    def test_optimize(self):
        cm = build_model(
            {('T0', 0): [0, 1], ('T0', 1): [0, 2], ('T0', 2): [0, 3]},
            broker_range(4),
        )
        constraint = BalancingConstraint(max_replicas_per_broker=2)

        ReplicaCapacityGoal().optimize(cm, constraint)

        assert cm.brokers[0].replica_count == 2
        assert max(b.replica_count for b in cm.brokers.values()) == 2

    def test_infeasible(self):
        cm = build_model(
            {('T0', 0): [0, 1], ('T0', 1): [0, 2]},
            broker_range(3),
        )
        constraint = BalancingConstraint(max_replicas_per_broker=1)

        with pytest.raises(OptimizationFailure) as e:
            ReplicaCapacityGoal().optimize(cm, constraint)

        assert e.value.state is OptimizerState.HARD_GOAL_INFEASIBLE
        assert e.value.broker_id == 0


class TestPotentialNwOutGoal:

    @pytest.fixture
    def brokers(self):
        capacity = dict(TEST_CAPACITY)
        capacity[Resource.NW_OUT] = 100.0
        return broker_range(4, capacity=capacity)

    def test_imbalance_counts_followers(self, brokers):
        cm = build_model(
            {('T0', 0): [0, 1], ('T0', 1): [1, 2]},
            brokers,
            {('T0', 0): load(nw_out=30.0), ('T0', 1): load(nw_out=30.0)},
        )
        constraint = BalancingConstraint(capacity_threshold=0.5)

        assert cm.brokers[1].load(Resource.NW_OUT) == 30.0
        assert PotentialNwOutGoal().imbalance(cm, constraint) == 10.0

    def test_optimize(self, brokers):
        cm = build_model(
            {('T0', 0): [0, 1], ('T0', 1): [1, 2]},
            brokers,
            {('T0', 0): load(nw_out=30.0), ('T0', 1): load(nw_out=30.0)},
        )
        constraint = BalancingConstraint(capacity_threshold=0.5)

        movements = PotentialNwOutGoal().optimize(cm, constraint)

        assert len(movements) == 1
        assert cm.assignment == {('T0', 0): [0, 3], ('T0', 1): [1, 2]}
        assert cm.brokers[1].potential_nw_out == 30.0
