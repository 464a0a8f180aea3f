"""External collaborators invoked by the bootstrap pipelines."""
import logging
import shlex
import shutil
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Optional, Union

from ..errors import StepError

logger = logging.getLogger(__name__)

DEFAULT_COMMANDS = {
    "pull_images": "docker compose pull",
    "git_hooks": "git config --local core.hooksPath .githooks",
    "up": "docker compose up -d",
    "submodule_init": "git submodule init",
    "submodule_update": "git submodule update",
    "yarn": "yarn install --frozen-lockfile",
    "compile_l2": "zk compiler all",
    "drop_db": "zk db drop --server --prover",
    "setup_db": "zk db setup --server --prover",
    "build_contracts": "zk contract build",
    "deploy_erc20": "zk run deploy-erc20 dev",
    "deploy_verifier": "zk contract deploy-verifier",
    "reload_env": "zk env",
    "genesis_from_sources": "zk server --genesis",
    "genesis_from_binary": "zk server --genesis --use-binary",
    "redeploy_l1": "zk contract redeploy",
    "initialize_validator": "zk contract initialize-validator",
    "deploy_l2": "zk contract deploy-l2",
    "initialize_weth_token": "zk contract initialize-l2-weth-token",
    "initialize_governance": "zk contract initialize-governance",
    "compile_config": "zk config compile",
}

REQUIRED_TOOLS = ("node", "yarn", "docker", "cargo")
MIN_NODE_VERSION = (14, 14, 0)

Runner = Callable[..., subprocess.CompletedProcess]


def parse_node_version(output: str) -> tuple[int, ...]:
    """Parse ``node --version`` output such as ``v18.17.1``."""
    text = output.strip().lstrip("v")
    try:
        return tuple(int(part) for part in text.split("."))
    except ValueError:
        raise ValueError(f"Unrecognized node version: {output.strip()!r}")


class Toolchain:
    """Shell-backed implementations of every external bootstrap step.

    Each step is a method that returns on success and raises StepError on
    failure. Commands can be overridden per instance.
    """

    def __init__(
        self,
        root: Union[str, Path] = ".",
        commands: Optional[dict[str, str]] = None,
        runner: Runner = subprocess.run,
    ):
        """Initialize toolchain.

        Args:
            root: Repository root the commands run in
            commands: Overrides for entries of DEFAULT_COMMANDS
            runner: Callable with the ``subprocess.run`` signature
        """
        self.root = Path(root)
        self.commands = {**DEFAULT_COMMANDS, **(commands or {})}
        self.runner = runner

    def run(
        self, step: str, args: Sequence = (), capture_output: bool = False
    ) -> subprocess.CompletedProcess:
        """Run the command registered for ``step``.

        Args:
            step: Key into the command table
            args: Extra arguments appended to the command
            capture_output: Capture stdout/stderr instead of inheriting them

        Raises:
            StepError: If the command cannot be started or exits non-zero
        """
        command = self.commands[step]
        if args:
            command = f"{command} {shlex.join(str(arg) for arg in args)}"
        return self._exec(step, command, capture_output)

    def _exec(
        self, step: str, command: str, capture_output: bool = False
    ) -> subprocess.CompletedProcess:
        logger.debug(f"[{step}] $ {command}")
        try:
            return self.runner(
                command,
                shell=True,
                cwd=self.root,
                check=True,
                text=True,
                capture_output=capture_output,
            )
        except subprocess.CalledProcessError as e:
            raise StepError(step, f"`{command}` exited with {e.returncode}") from e
        except OSError as e:
            raise StepError(step, f"`{command}` could not be started: {e}") from e

    def check_env(self):
        """Verify required tools are on PATH and node is recent enough."""
        for tool in REQUIRED_TOOLS:
            if shutil.which(tool) is None:
                raise StepError("check_env", f"{tool} not found on PATH")

        result = self._exec("check_env", "node --version", capture_output=True)
        try:
            version = parse_node_version(result.stdout)
        except ValueError as e:
            raise StepError("check_env", str(e)) from e
        if version < MIN_NODE_VERSION:
            required = ".".join(str(part) for part in MIN_NODE_VERSION)
            raise StepError(
                "check_env", f"node.js version {required} or higher is required"
            )

    def clean(self, target: str):
        """Remove a state directory such as ``db`` or ``backups`` under root."""
        path = self.root / target
        if path.exists():
            shutil.rmtree(path)
            logger.info(f"Removed {path}")
        else:
            logger.debug(f"Nothing to clean at {path}")

    def submodule_update(self):
        self.run("submodule_init")
        self.run("submodule_update")

    def pull_images(self):
        self.run("pull_images")

    def git_hooks(self):
        self.run("git_hooks")

    def up(self):
        self.run("up")

    def yarn(self):
        self.run("yarn")

    def compile_l2(self):
        self.run("compile_l2")

    def drop_db(self):
        self.run("drop_db")

    def setup_db(self):
        self.run("setup_db")

    def build_contracts(self):
        self.run("build_contracts")

    def deploy_erc20(self, args: Sequence = ()):
        self.run("deploy_erc20", args)

    def deploy_verifier(self, args: Sequence = ()):
        self.run("deploy_verifier", args)

    def reload_env(self):
        self.run("reload_env")

    def genesis_from_sources(self):
        self.run("genesis_from_sources")

    def genesis_from_binary(self):
        self.run("genesis_from_binary")

    def redeploy_l1(self, args: Sequence = ()):
        self.run("redeploy_l1", args)

    def initialize_validator(self, args: Sequence = ()):
        self.run("initialize_validator", args)

    def deploy_l2(
        self,
        args: Sequence = (),
        include_paymaster: bool = True,
        include_l2_weth: bool = True,
    ):
        flags = list(args)
        if include_paymaster:
            flags.append("--include-paymaster")
        if include_l2_weth:
            flags.append("--include-l2-weth")
        self.run("deploy_l2", flags)

    def initialize_weth_token(self, args: Sequence = ()):
        self.run("initialize_weth_token", args)

    def initialize_governance(self, args: Sequence = ()):
        self.run("initialize_governance", args)

    def compile_config(self):
        self.run("compile_config")
