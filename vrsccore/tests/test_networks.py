"""
Tests for vrsccore.networks
"""

import pydantic
import pytest

from vrsccore.constants import SAPLING_BRANCH_ID, SAPLING_VERSION_GROUP_ID
from vrsccore.errors import ValidationError
from vrsccore.networks import (
    VERUS_MAINNET,
    VERUS_TESTNET,
    NetworkType,
    get_network,
)


def test_get_network():
    assert get_network("mainnet") is VERUS_MAINNET
    assert get_network(NetworkType.TESTNET) is VERUS_TESTNET


def test_unknown_network():
    with pytest.raises(ValidationError, match="Unknown network"):
        get_network("regtest")


def test_verus_version_bytes():
    assert VERUS_MAINNET.pub_key_hash == 0x3C
    assert VERUS_MAINNET.script_hash == 0x55
    assert VERUS_MAINNET.wif == 0xBC
    assert VERUS_MAINNET.address_prefix == "R"


def test_sapling_format():
    for params in (VERUS_MAINNET, VERUS_TESTNET):
        assert params.tx_version == 4
        assert params.version_group_id == SAPLING_VERSION_GROUP_ID
        assert params.consensus_branch_id == SAPLING_BRANCH_ID


def test_params_are_frozen():
    with pytest.raises(pydantic.ValidationError):
        VERUS_MAINNET.pub_key_hash = 0x00


def test_version_byte_range():
    with pytest.raises(pydantic.ValidationError):
        VERUS_MAINNET.model_validate({**VERUS_MAINNET.model_dump(), "wif": 0x100})
