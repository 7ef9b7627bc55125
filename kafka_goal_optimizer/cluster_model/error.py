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
from kafka_goal_optimizer.util.error import GoalOptimizerError


class InvalidBrokerIdError(GoalOptimizerError):
    """Raised when a broker id doesn't exist in the cluster."""
    pass


class InvalidPartitionError(GoalOptimizerError):
    """Raised when a partition tuple (topic, partition) doesn't exist in the cluster"""
    pass


class InvalidRelocationError(GoalOptimizerError):
    """Raised when a replica relocation is inconsistent with the cluster model,
    e.g. the source broker does not host the replica or the destination is dead.
    This always signals a bug in the caller.
    """
    pass


class InvalidLoadError(GoalOptimizerError):
    """Raised when a replica is assigned a negative load or a broker a
    non-positive capacity.
    """
    pass


class InvalidSnapshotError(GoalOptimizerError):
    """Raised when a cluster snapshot document is malformed."""
    pass
