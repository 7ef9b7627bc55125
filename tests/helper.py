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
import math
import random

from kafka_goal_optimizer.cluster_model.cluster_model import ClusterModel
from kafka_goal_optimizer.cluster_model.load_measurer import FOLLOWER_CPU_RATIO
from kafka_goal_optimizer.cluster_model.resource import Resource
from kafka_goal_optimizer.cluster_model.snapshot import SnapshotLoadMeasurer


TEST_CAPACITY = {
    Resource.CPU: 100.0,
    Resource.DISK: 100000.0,
    Resource.NW_IN: 10000.0,
    Resource.NW_OUT: 10000.0,
}


def load(cpu=0.0, disk=0.0, nw_in=0.0, nw_out=0.0):
    return {
        Resource.CPU: cpu,
        Resource.DISK: disk,
        Resource.NW_IN: nw_in,
        Resource.NW_OUT: nw_out,
    }


def broker_range(n, racks=None, dead=(), capacity=None):
    """Broker metadata for ids 0..n-1. Broker i lives in rack r<i % racks>,
    or in a rack of its own when racks is None.
    """
    return {
        i: {
            'rack': f'r{i % racks}' if racks else None,
            'alive': i not in dead,
            'capacity': dict(capacity or TEST_CAPACITY),
        }
        for i in range(n)
    }


def build_model(assignment, brokers, leader_loads=None, follower_loads=None):
    """ClusterModel with the given leader loads, unit load by default."""
    leader_loads = {
        partition: leader_loads.get(partition, load())
        for partition in assignment
    } if leader_loads is not None else {
        partition: load(1.0, 1.0, 1.0, 1.0) for partition in assignment
    }
    return ClusterModel(
        assignment,
        brokers,
        SnapshotLoadMeasurer(leader_loads, follower_loads),
    )


def generate_cluster(
    num_brokers=20,
    num_racks=4,
    num_dead=0,
    num_topics=10,
    partitions_per_topic=10,
    replication_factor=3,
    utilization=0.35,
    seed=0,
):
    """Generate a random rack aware cluster.

    Brokers 0..num_dead-1 are dead; broker i lives in rack r<i % num_racks>
    so that dead brokers are spread over the racks. Leader loads are random
    and scaled so that, once dead brokers are empty, the average utilization
    of cpu, disk and network inbound on the alive brokers is utilization.
    The outbound network load is scaled the same way on the potential
    outbound load, which counts the leader load on every replica.
    """
    assert replication_factor <= num_racks
    rng = random.Random(seed)
    brokers = broker_range(num_brokers, num_racks, dead=range(num_dead))
    rack_brokers = {
        rack: [b for b in range(num_brokers) if b % num_racks == rack]
        for rack in range(num_racks)
    }

    assignment = {}
    weights = {}
    for topic_index in range(num_topics):
        for partition_id in range(partitions_per_topic):
            name = (f'T{topic_index}', partition_id)
            racks = rng.sample(range(num_racks), replication_factor)
            assignment[name] = [rng.choice(rack_brokers[rack]) for rack in racks]
            weights[name] = {
                resource: rng.uniform(0.5, 1.5) for resource in Resource
            }

    replica_factor = {
        Resource.CPU: 1 + FOLLOWER_CPU_RATIO * (replication_factor - 1),
        Resource.DISK: replication_factor,
        Resource.NW_IN: replication_factor,
        Resource.NW_OUT: replication_factor,
    }
    alive_count = num_brokers - num_dead
    scale = {
        resource: utilization * TEST_CAPACITY[resource] * alive_count / math.fsum(
            w[resource] * replica_factor[resource] for w in weights.values()
        )
        for resource in Resource
    }
    leader_loads = {
        name: {resource: w[resource] * scale[resource] for resource in Resource}
        for name, w in weights.items()
    }
    return build_model(assignment, brokers, leader_loads)


def total_loads(cluster_model):
    return {
        resource: cluster_model.total_load(resource) for resource in Resource
    }
