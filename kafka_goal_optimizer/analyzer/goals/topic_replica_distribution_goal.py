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
from .replica_distribution_goal import count_window


class TopicReplicaDistributionGoal(DistributionGoal):
    """Balance the replicas of each topic across the alive brokers,
    independently of the other topics.
    """

    def _dimensions(self, cluster_model):
        return [cluster_model.topics[topic_id] for topic_id in sorted(cluster_model.topics)]

    def _replica_dimension(self, replica):
        return replica.topic

    def _broker_value(self, broker, topic):
        return broker.count_replicas(topic)

    def _replica_value(self, replica):
        return 1

    def _broker_replicas(self, broker, topic):
        return [replica for replica in broker.replicas if replica.topic is topic]

    def _limits(self, cluster_model, constraint, topic):
        return count_window(
            topic.replica_count,
            len(cluster_model.alive_brokers()),
            constraint,
        )

    def _window(self, broker, limits):
        return limits

    def _destination_key(self, broker, constraint):
        return (len(broker.topics), broker.replica_count)
