"""Bootstrap pipelines for the local development network."""
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import NamedTuple, Optional

from ..core.planner import ConfigEdit
from ..formats.config_file import apply_config_patch
from .announcer import Announcer
from .modes import DeploymentMode, mode_config_targets
from .toolchain import Toolchain

logger = logging.getLogger(__name__)


class InitOptions(NamedTuple):
    """Everything a bootstrap run needs, passed explicitly."""
    mode: DeploymentMode = DeploymentMode.ROLLUP
    root: Path = Path(".")
    env_file: Optional[Path] = None
    ci: bool = False
    skip_submodules_checkout: bool = False
    skip_env_setup: bool = False
    governor_private_key_args: tuple = ()
    deployer_private_key_args: tuple = ()
    deployer_l2_args: tuple = ()
    include_paymaster: bool = True
    include_l2_weth: bool = True
    deploy_test_tokens: bool = True
    test_token_args: tuple = ()

    @classmethod
    def from_environ(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides
    ) -> "InitOptions":
        """Build options from ``CI``, ``ENV_FILE`` and ``ZKSYNC_HOME``.

        Args:
            environ: Environment mapping (defaults to ``os.environ``)
            **overrides: Field values that take precedence

        Returns:
            InitOptions instance
        """
        if environ is None:
            environ = os.environ

        values = {"ci": bool(environ.get("CI"))}
        if environ.get("ZKSYNC_HOME"):
            values["root"] = Path(environ["ZKSYNC_HOME"])
        if environ.get("ENV_FILE"):
            values["env_file"] = Path(environ["ENV_FILE"])
        values.update(overrides)
        return cls(**values)


def update_config(options: InitOptions, toolchain: Toolchain):
    """Rewrite mode-dependent configuration and record the mode in the env file."""
    for relative_path, edits in mode_config_targets(options.mode):
        apply_config_patch(options.root / relative_path, edits)

    toolchain.compile_config()

    if options.env_file is not None:
        apply_config_patch(
            options.env_file, [ConfigEdit("VALIDIUM_MODE", options.mode.is_validium)]
        )
    else:
        logger.warning("No env file configured, VALIDIUM_MODE not recorded")


def _setup(options: InitOptions, toolchain: Toolchain, announcer: Announcer):
    announcer.announced(f"Initializing in {options.mode.label}")
    announcer.announced(
        "Updating mode configuration", lambda: update_config(options, toolchain)
    )


def init(
    options: InitOptions,
    toolchain: Optional[Toolchain] = None,
    announcer: Optional[Announcer] = None,
):
    """Full network initialization for development."""
    toolchain = toolchain or Toolchain(options.root)
    announcer = announcer or Announcer()
    step = announcer.announced

    _setup(options, toolchain, announcer)
    if not options.ci and not options.skip_env_setup:
        step("Pulling images", toolchain.pull_images)
        step("Checking environment", toolchain.check_env)
        step("Checking git hooks", toolchain.git_hooks)
        step("Setting up containers", toolchain.up)
    if not options.skip_submodules_checkout:
        step("Checkout system-contracts submodule", toolchain.submodule_update)

    step("Compiling JS packages", toolchain.yarn)
    step("Compile l2 contracts", toolchain.compile_l2)
    step("Drop postgres db", toolchain.drop_db)
    step("Setup postgres db", toolchain.setup_db)
    step("Clean rocksdb", lambda: toolchain.clean("db"))
    step("Clean backups", lambda: toolchain.clean("backups"))
    step("Building contracts", toolchain.build_contracts)
    if options.deploy_test_tokens:
        step(
            "Deploying localhost ERC20 tokens",
            lambda: toolchain.deploy_erc20(options.test_token_args),
        )
    step(
        "Deploying L1 verifier",
        lambda: toolchain.deploy_verifier(options.deployer_private_key_args),
    )
    step("Reloading env", toolchain.reload_env)
    step("Running server genesis setup", toolchain.genesis_from_sources)
    step(
        "Deploying L1 contracts",
        lambda: toolchain.redeploy_l1(options.deployer_private_key_args),
    )
    step(
        "Initializing validator",
        lambda: toolchain.initialize_validator(options.governor_private_key_args),
    )
    step(
        "Deploying L2 contracts",
        lambda: toolchain.deploy_l2(
            options.deployer_l2_args,
            options.include_paymaster,
            options.include_l2_weth,
        ),
    )
    if options.include_l2_weth:
        step(
            "Initializing L2 WETH token",
            lambda: toolchain.initialize_weth_token(options.governor_private_key_args),
        )
    step(
        "Initializing governance",
        lambda: toolchain.initialize_governance(options.governor_private_key_args),
    )


def reinit(
    options: InitOptions,
    toolchain: Optional[Toolchain] = None,
    announcer: Optional[Announcer] = None,
):
    """Reset an environment that ``init`` already set up once. Faster than init."""
    toolchain = toolchain or Toolchain(options.root)
    announcer = announcer or Announcer()
    step = announcer.announced

    _setup(options, toolchain, announcer)
    step("Setting up containers", toolchain.up)
    step("Compiling JS packages", toolchain.yarn)
    step("Compile l2 contracts", toolchain.compile_l2)
    step("Drop postgres db", toolchain.drop_db)
    step("Setup postgres db", toolchain.setup_db)
    step("Clean rocksdb", lambda: toolchain.clean("db"))
    step("Clean backups", lambda: toolchain.clean("backups"))
    step("Building contracts", toolchain.build_contracts)
    step("Deploying L1 verifier", toolchain.deploy_verifier)
    step("Reloading env", toolchain.reload_env)
    step("Running server genesis setup", toolchain.genesis_from_sources)
    step("Deploying L1 contracts", toolchain.redeploy_l1)
    step("Deploying L2 contracts", lambda: toolchain.deploy_l2((), True, True))
    step("Initializing L2 WETH token", toolchain.initialize_weth_token)
    step("Initializing governance", toolchain.initialize_governance)
    step("Initializing validator", toolchain.initialize_validator)


def lightweight_init(
    options: InitOptions,
    toolchain: Optional[Toolchain] = None,
    announcer: Optional[Announcer] = None,
):
    """Set up databases and genesis, then deploy precompiled contracts."""
    toolchain = toolchain or Toolchain(options.root)
    announcer = announcer or Announcer()
    step = announcer.announced

    _setup(options, toolchain, announcer)
    step("Setting up containers", toolchain.up)
    step("Clean rocksdb", lambda: toolchain.clean("db"))
    step("Clean backups", lambda: toolchain.clean("backups"))
    step("Deploying L1 verifier", toolchain.deploy_verifier)
    step("Reloading env", toolchain.reload_env)
    step("Running server genesis setup", toolchain.genesis_from_binary)
    step("Deploying localhost ERC20 tokens", toolchain.deploy_erc20)
    step("Deploying L1 contracts", toolchain.redeploy_l1)
    step("Initializing validator", toolchain.initialize_validator)
    step("Deploying L2 contracts", lambda: toolchain.deploy_l2((), True, False))
    step("Initializing governance", toolchain.initialize_governance)
