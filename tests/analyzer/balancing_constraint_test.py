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

from kafka_goal_optimizer.analyzer.balancing_constraint import BalancingConstraint
from kafka_goal_optimizer.cluster_model.broker import Broker
from kafka_goal_optimizer.cluster_model.resource import Resource
from kafka_goal_optimizer.util.error import InvalidConfigurationError


class TestBalancingConstraint:

    def test_defaults(self):
        constraint = BalancingConstraint()

        assert constraint.capacity_threshold(Resource.DISK) == 0.8
        assert constraint.balance_percentage == 0.1
        assert constraint.max_replicas_per_broker == 10000

    def test_threshold_per_resource(self):
        constraint = BalancingConstraint(capacity_threshold={'cpu': 0.5, Resource.DISK: 0.9})

        assert constraint.capacity_threshold(Resource.CPU) == 0.5
        assert constraint.capacity_threshold(Resource.DISK) == 0.9
        assert constraint.capacity_threshold(Resource.NW_IN) == 0.8

    @pytest.mark.parametrize('threshold', [0, -0.1, 1.5, 'high', True])
    def test_invalid_threshold(self, threshold):
        with pytest.raises(InvalidConfigurationError):
            BalancingConstraint(capacity_threshold=threshold)

    def test_invalid_threshold_resource(self):
        with pytest.raises(InvalidConfigurationError):
            BalancingConstraint(capacity_threshold={'gpu': 0.5})

    @pytest.mark.parametrize('balance_percentage', [0, -1, None])
    def test_invalid_balance_percentage(self, balance_percentage):
        with pytest.raises(InvalidConfigurationError):
            BalancingConstraint(balance_percentage=balance_percentage)

    @pytest.mark.parametrize('max_replicas', [0, -5, 2.5, True])
    def test_invalid_max_replicas(self, max_replicas):
        with pytest.raises(InvalidConfigurationError):
            BalancingConstraint(max_replicas_per_broker=max_replicas)

    def test_from_config(self):
        constraint = BalancingConstraint.from_config({
            'capacity_threshold': {'disk': 0.7},
            'max_replicas_per_broker': 20,
        })

        assert constraint == BalancingConstraint(
            capacity_threshold={Resource.DISK: 0.7},
            max_replicas_per_broker=20,
        )
        assert hash(constraint) == hash(BalancingConstraint(
            capacity_threshold={Resource.DISK: 0.7},
            max_replicas_per_broker=20,
        ))

    def test_from_empty_config(self):
        assert BalancingConstraint.from_config(None) == BalancingConstraint()

    def test_from_config_unknown_option(self):
        with pytest.raises(InvalidConfigurationError):
            BalancingConstraint.from_config({'balance_threshold': 0.1})

    def test_capacity_limit(self):
        constraint = BalancingConstraint(capacity_threshold=0.5)
        broker = Broker(1, capacity={Resource.CPU: 40})

        assert constraint.capacity_limit(broker, Resource.CPU) == 20
        assert not constraint.exceeds_capacity_threshold(broker, Resource.CPU)

    def test_balance_limits(self):
        constraint = BalancingConstraint(balance_percentage=0.5)

        assert constraint.balance_limits(0.4) == pytest.approx((0.2, 0.6))

    def test_not_equal(self):
        assert BalancingConstraint() != BalancingConstraint(balance_percentage=0.2)
