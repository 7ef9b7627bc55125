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

from .resource import load_vector
from .resource import Resource


# Followers only replicate: they serve no consumers and do a fraction of the
# leader's request handling.
FOLLOWER_CPU_RATIO = 0.5


class LoadMeasurer:
    """An interface used to gather the load a partition puts on the brokers
    hosting its replicas.
    """

    def get_leader_load(self, partition_name: tuple[str, int]) -> dict[Resource, float]:
        """Return the load vector of the leader replica of the partition.

        :param partition_name: A tuple with the topic id and partition id as the first and second elements respectively.
        """
        raise NotImplementedError("Implement in subclass.")

    def get_follower_load(self, partition_name: tuple[str, int]) -> dict[Resource, float]:
        """Return the load vector of a follower replica of the partition.

        Defaults to an estimate based on the leader load: same disk and
        inbound network, no outbound network and a fraction of the CPU.
        """
        leader_load = load_vector(self.get_leader_load(partition_name))
        return {
            Resource.CPU: leader_load[Resource.CPU] * FOLLOWER_CPU_RATIO,
            Resource.DISK: leader_load[Resource.DISK],
            Resource.NW_IN: leader_load[Resource.NW_IN],
            Resource.NW_OUT: 0.0,
        }
