#!/usr/bin/env python3
"""
Lua script that reserves sequence ranges atomically inside Redis.

The script is rendered once per configuration and loaded with SCRIPT LOAD.

KEYS:
    1. data type (informational only, reservations do not depend on it)
    2. number of IDs wanted
    3. optional explicit timestamp in Unix milliseconds

Reply:
    {start_sequence, end_sequence, logical_shard_id, seconds, microseconds}

Logical shard IDs are handed out in strict rotation over the configured range.
Each shard keeps one counter per millisecond. A request larger than what is
left in the current millisecond is capped at ``max_sequence``; a request that
finds the millisecond already exhausted gets an error reply, which the client
treats as transient and retries.
"""

from string import Template

from vin.models.config import Config

# Sequence counters for clock-based timestamps only need to outlive their millisecond.
CLOCK_SEQUENCE_TTL_MS = 1000

LUA_SCRIPT_TEMPLATE = Template("""
local max_sequence = ${max_sequence}
local logical_shard_id_min = ${logical_shard_id_min}
local logical_shard_id_max = ${logical_shard_id_max}
local clock_sequence_ttl_ms = ${clock_sequence_ttl_ms}
local explicit_timestamp_ttl_ms = ${explicit_timestamp_ttl_ms}
local shard_counter_key = '${key_prefix}:next-logical-shard-id'
local sequence_key_prefix = '${key_prefix}:sequence:'

local num_ids = tonumber(KEYS[2])
if num_ids == nil or num_ids < 1 or num_ids % 1 ~= 0 then
  return redis.error_reply('VIN: count must be a positive integer')
end

local seconds
local microseconds
local millisecond_key
local ttl_ms

if KEYS[3] ~= nil and KEYS[3] ~= '' then
  local explicit_timestamp = tonumber(KEYS[3])
  if explicit_timestamp == nil or explicit_timestamp < 0 or explicit_timestamp % 1 ~= 0 then
    return redis.error_reply('VIN: timestamp must be a non-negative integer')
  end
  seconds = math.floor(explicit_timestamp / 1000)
  microseconds = (explicit_timestamp % 1000) * 1000
  millisecond_key = KEYS[3]
  ttl_ms = explicit_timestamp_ttl_ms
else
  local now = redis.call('TIME')
  seconds = tonumber(now[1])
  microseconds = tonumber(now[2])
  millisecond_key = now[1] .. string.format('%03d', math.floor(microseconds / 1000))
  ttl_ms = clock_sequence_ttl_ms
end

local shard_count = logical_shard_id_max - logical_shard_id_min + 1
local turn = redis.call('INCR', shard_counter_key)
if turn >= shard_count then
  redis.call('SET', shard_counter_key, 0)
end
local logical_shard_id = logical_shard_id_min + ((turn - 1) % shard_count)

local sequence_key = sequence_key_prefix .. logical_shard_id .. ':' .. millisecond_key
local next_sequence = redis.call('INCRBY', sequence_key, num_ids)
-- Never shorten a TTL: clock and explicit reservations can share a key.
if redis.call('PTTL', sequence_key) < ttl_ms then
  redis.call('PEXPIRE', sequence_key, ttl_ms)
end

local start_sequence = next_sequence - num_ids
if start_sequence > max_sequence then
  return redis.error_reply('VIN: sequence exhausted for logical shard ' .. logical_shard_id .. ' at ' .. millisecond_key)
end

local end_sequence = math.min(next_sequence - 1, max_sequence)

return {start_sequence, end_sequence, logical_shard_id, seconds, microseconds}
""")


def generate_script(config: Config) -> str:
    """
    Render the Lua script for a configuration.

    Args:
        config: Generator configuration

    Returns:
        Lua source ready for SCRIPT LOAD
    """
    logical_shard_id_min, logical_shard_id_max = config.logical_shard_id_range
    return LUA_SCRIPT_TEMPLATE.substitute(
        config.layout.to_dict(),
        logical_shard_id_min=logical_shard_id_min,
        logical_shard_id_max=logical_shard_id_max,
        clock_sequence_ttl_ms=CLOCK_SEQUENCE_TTL_MS,
        explicit_timestamp_ttl_ms=config.explicit_timestamp_ttl_ms,
        key_prefix=config.key_prefix,
    )
