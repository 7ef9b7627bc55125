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


class ReplicaCapacityGoal(CapacityGoal):
    """Keep the number of replicas of every broker under
    max_replicas_per_broker.
    """

    def _broker_value(self, broker):
        return broker.replica_count

    def _replica_value(self, replica):
        return 1

    def _limit(self, broker, constraint):
        return constraint.max_replicas_per_broker
