"""
orjson serialization of consensus records.

Keys are sorted so the same state always serializes to the same bytes.
"""
import dataclasses
from typing import Any, Dict

import orjson

from .datatypes import ConsensusState

DUMP_OPTIONS = orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS


def state_to_dict(state: ConsensusState) -> Dict[str, Any]:
    data = dataclasses.asdict(state)
    for entry in data["miner_consensus"] + data["validator_consensus"]:
        entry["kind"] = entry["kind"].value
    return data


def dumps_state(state: ConsensusState, pretty: bool = False) -> bytes:
    options = DUMP_OPTIONS | (orjson.OPT_INDENT_2 if pretty else 0)
    return orjson.dumps(state_to_dict(state), option=options)


def loads(raw: bytes) -> Any:
    return orjson.loads(raw)
