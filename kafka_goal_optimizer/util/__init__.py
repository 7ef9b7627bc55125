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

from argparse import ArgumentTypeError


def non_negative_int(string: str) -> int:
    """Convert string to a non-negative integer."""
    error_msg = f'Non-negative integer required, {string} given.'
    try:
        value = int(string)
    except ValueError:
        raise ArgumentTypeError(error_msg)
    if value < 0:
        raise ArgumentTypeError(error_msg)
    return value


def broker_id_list(string: str) -> list[int]:
    """Convert a comma separated string to a list of broker ids."""
    return [non_negative_int(b_id) for b_id in string.split(',') if b_id.strip()]


def format_ratio(value: float) -> str:
    """Render a fraction as a percentage with one decimal."""
    return f'{value * 100:.1f}%'
