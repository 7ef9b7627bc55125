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

from .distribution_goal import DistributionGoal
from kafka_goal_optimizer.cluster_model.resource import Resource


class ResourceDistributionGoal(DistributionGoal):
    """Balance the utilization of a resource across the alive brokers.

    Each broker should stay within balance_percentage of the cluster
    utilization, that is the total load of the resource (dead brokers
    included) over the capacity of the alive brokers. Windows scale with
    the broker capacity.
    """

    resource: Resource

    def _broker_value(self, broker, dimension):
        return broker.load(self.resource)

    def _replica_value(self, replica):
        return replica.load[self.resource]

    def _limits(self, cluster_model, constraint, dimension):
        return constraint.balance_limits(cluster_model.average_utilization(self.resource))

    def _window(self, broker, limits):
        low_ratio, high_ratio = limits
        capacity = broker.capacity[self.resource]
        return capacity * low_ratio, capacity * high_ratio

    def _destination_key(self, broker, constraint):
        return broker.utilization(self.resource)

    def _evacuation_order(self, replicas):
        return sorted(replicas, key=lambda r: (-self._replica_value(r), r.partition.name))


class CpuUsageDistributionGoal(ResourceDistributionGoal):
    resource = Resource.CPU


class DiskUsageDistributionGoal(ResourceDistributionGoal):
    resource = Resource.DISK


class NetworkInboundUsageDistributionGoal(ResourceDistributionGoal):
    resource = Resource.NW_IN


class NetworkOutboundUsageDistributionGoal(ResourceDistributionGoal):
    resource = Resource.NW_OUT
