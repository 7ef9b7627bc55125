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

from .capacity_goal import CapacityGoal
from kafka_goal_optimizer.cluster_model.resource import Resource


class PotentialNwOutGoal(CapacityGoal):
    """Keep the outbound network load a broker would carry if it became the
    leader of every partition it hosts under its network outbound limit.

    A replica brings the leader outbound load of its partition to the
    potential of its broker, whatever its current role.
    """

    def _broker_value(self, broker):
        return broker.potential_nw_out

    def _replica_value(self, replica):
        return replica.partition.leader_load(Resource.NW_OUT)

    def _limit(self, broker, constraint):
        return constraint.capacity_limit(broker, Resource.NW_OUT)
