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

from collections import OrderedDict
from collections.abc import Sequence

from .goal import Goal
from kafka_goal_optimizer.analyzer.balancing_constraint import BalancingConstraint
from kafka_goal_optimizer.analyzer.error import OptimizationFailure
from kafka_goal_optimizer.analyzer.error import OptimizerState
from kafka_goal_optimizer.cluster_model.cluster_model import ClusterModel
from kafka_goal_optimizer.cluster_model.movement import ReplicaMovement
from kafka_goal_optimizer.cluster_model.partition import Partition
from kafka_goal_optimizer.cluster_model.replica import Replica


class RackAwareGoal(Goal):
    """Hard goal placing the replicas of every partition in distinct racks."""

    is_hard_goal = True

    def accepts(self, replica, destination, cluster_model, constraint):
        return all(
            other is replica or other.broker.rack is not destination.rack
            for other in replica.partition.replicas
        )

    def imbalance(self, cluster_model, constraint):
        misplaced = sum(
            len(self._misplaced_replicas(partition))
            for partition in cluster_model.partitions.values()
        )
        on_dead_brokers = sum(
            broker.replica_count for broker in cluster_model.dead_brokers()
        )
        return float(misplaced + on_dead_brokers)

    def _is_satisfied(self, cluster_model, constraint):
        return all(
            len({rack.id for rack in partition.racks}) == partition.replication_factor
            for partition in cluster_model.partitions.values()
        )

    def _misplaced_replicas(self, partition: Partition) -> list[Replica]:
        """Replicas sharing their rack with another replica of the partition.

        One replica per rack stays in place: the leader if the rack hosts it,
        otherwise the first one in replica order.
        """
        by_rack: OrderedDict[str, list[Replica]] = OrderedDict()
        for replica in partition.replicas:
            by_rack.setdefault(replica.broker.rack.id, []).append(replica)
        misplaced = []
        for replicas in by_rack.values():
            if len(replicas) < 2:
                continue
            keep = next((r for r in replicas if r.is_leader), replicas[0])
            misplaced.extend(r for r in replicas if r is not keep)
        return misplaced

    def _rebalance(
        self,
        cluster_model: ClusterModel,
        constraint: BalancingConstraint,
        excluded: frozenset[int],
        optimized_goals: Sequence[Goal],
    ) -> list[ReplicaMovement]:
        movements = []
        for partition_name in sorted(cluster_model.partitions):
            partition = cluster_model.partitions[partition_name]
            for replica in self._misplaced_replicas(partition):
                destination = self._select_destination(
                    replica,
                    cluster_model,
                    constraint,
                    excluded,
                    optimized_goals,
                )
                if destination is None:
                    self.log.error(
                        "No rack available for replica %s of partition %s",
                        replica,
                        partition_name,
                    )
                    raise OptimizationFailure(
                        self.name,
                        "no broker in a rack free of partition {pname}".format(
                            pname=partition_name,
                        ),
                        OptimizerState.HARD_GOAL_INFEASIBLE,
                        broker_id=replica.broker.id,
                        partition=partition_name,
                    )
                movements.append(self._relocate(cluster_model, replica, destination))
        return movements
