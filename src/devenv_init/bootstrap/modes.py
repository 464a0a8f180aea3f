"""Operating modes and the configuration edits each one requires."""
from enum import Enum

from ..core.planner import ConfigEdit

CHAIN_CONFIG_PATH = "etc/env/base/chain.toml"
ETH_SENDER_PATH = "etc/env/base/eth_sender.toml"
EXT_NODE_PATH = "etc/env/ext-node.toml"

ROLLUP_COMPUTE_OVERHEAD_PART = 0
ROLLUP_PUBDATA_OVERHEAD_PART = 1
ROLLUP_BATCH_OVERHEAD_L1_GAS = 800000
ROLLUP_MAX_PUBDATA_PER_BATCH = 120000
ROLLUP_L1_BATCH_COMMIT_DATA_GENERATOR_MODE = "Rollup"

VALIDIUM_COMPUTE_OVERHEAD_PART = 1
VALIDIUM_PUBDATA_OVERHEAD_PART = 0
VALIDIUM_BATCH_OVERHEAD_L1_GAS = 1000000
VALIDIUM_MAX_PUBDATA_PER_BATCH = 1000000000000
VALIDIUM_L1_GAS_PER_PUBDATA_BYTE = 0
VALIDIUM_L1_BATCH_COMMIT_DATA_GENERATOR_MODE = "Validium"


class DeploymentMode(Enum):
    ROLLUP = "rollup"
    VALIDIUM = "validium"

    @property
    def is_validium(self) -> bool:
        return self is DeploymentMode.VALIDIUM

    @property
    def label(self) -> str:
        return "Validium mode" if self.is_validium else "Roll-up mode"

    @classmethod
    def from_flag(cls, validium: bool) -> "DeploymentMode":
        return cls.VALIDIUM if validium else cls.ROLLUP


def chain_config_edits(mode: DeploymentMode) -> list[ConfigEdit]:
    validium = mode.is_validium
    return [
        ConfigEdit(
            "compute_overhead_part",
            VALIDIUM_COMPUTE_OVERHEAD_PART if validium else ROLLUP_COMPUTE_OVERHEAD_PART,
        ),
        ConfigEdit(
            "pubdata_overhead_part",
            VALIDIUM_PUBDATA_OVERHEAD_PART if validium else ROLLUP_PUBDATA_OVERHEAD_PART,
        ),
        ConfigEdit(
            "batch_overhead_l1_gas",
            VALIDIUM_BATCH_OVERHEAD_L1_GAS if validium else ROLLUP_BATCH_OVERHEAD_L1_GAS,
        ),
        ConfigEdit(
            "max_pubdata_per_batch",
            VALIDIUM_MAX_PUBDATA_PER_BATCH if validium else ROLLUP_MAX_PUBDATA_PER_BATCH,
        ),
        ConfigEdit(
            "l1_batch_commit_data_generator_mode",
            VALIDIUM_L1_BATCH_COMMIT_DATA_GENERATOR_MODE
            if validium
            else ROLLUP_L1_BATCH_COMMIT_DATA_GENERATOR_MODE,
        ),
    ]


def eth_sender_edits(mode: DeploymentMode) -> list[ConfigEdit]:
    # Only meaningful for validium; rollup mode drops the override.
    value = VALIDIUM_L1_GAS_PER_PUBDATA_BYTE if mode.is_validium else None
    return [ConfigEdit("l1_gas_per_pubdata_byte", value)]


def ext_node_edits(mode: DeploymentMode) -> list[ConfigEdit]:
    if mode.is_validium:
        return [
            ConfigEdit(
                "l1_batch_commit_data_generator_mode",
                VALIDIUM_L1_BATCH_COMMIT_DATA_GENERATOR_MODE,
                "en",
            )
        ]
    return [ConfigEdit("l1_batch_commit_data_generator_mode", None)]


def mode_config_targets(mode: DeploymentMode) -> list[tuple[str, list[ConfigEdit]]]:
    """Relative config paths paired with the edits ``mode`` applies to them."""
    return [
        (CHAIN_CONFIG_PATH, chain_config_edits(mode)),
        (ETH_SENDER_PATH, eth_sender_edits(mode)),
        (EXT_NODE_PATH, ext_node_edits(mode)),
    ]
