"""Low-level wrapper around the keystone command-line tool.

Builds argument vectors and environments, runs the tool and maps failures to
typed exceptions. Output is never interpreted here.
"""
from __future__ import annotations
import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Mapping, NamedTuple, Optional, Protocol, Sequence, Union

from .exceptions import CommandError

logger = logging.getLogger(__name__)

OptionValue = Union[str, bool, None]
Environment = Mapping[str, Optional[str]]

SERVICE_ENDPOINT_ENV = "OS_SERVICE_ENDPOINT"
SERVICE_TOKEN_ENV = "OS_SERVICE_TOKEN"

SECRET_FLAGS = frozenset({"--pass", "--os-password"})
MASK = "********"


class CommandResult(NamedTuple):
    """Outcome of one external process run."""
    exit_code: int
    stdout: str
    stderr: str


class CommandExecutor(Protocol):
    def execute(self, args: Sequence[str], env: Environment) -> CommandResult:
        ...


class SubprocessExecutor:
    """Run commands with :mod:`subprocess`, blocking until they exit.

    The supplied environment is layered over the inherited one: variables
    left out of ``env`` keep whatever value the calling process has, and a
    ``None`` value removes the variable from the child environment.
    """

    def execute(self, args: Sequence[str], env: Environment) -> CommandResult:
        merged = dict(os.environ)
        for name, value in env.items():
            if value is None:
                merged.pop(name, None)
            else:
                merged[name] = value
        proc = subprocess.run(
            list(args),
            env=merged,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
        )
        return CommandResult(proc.returncode, proc.stdout, proc.stderr)


@dataclass(frozen=True)
class Credentials:
    """Username/password identity used instead of the service token."""
    username: str
    password: str
    tenant_name: str
    auth_url: Optional[str] = None

    def as_args(self) -> List[str]:
        args = [
            "--os-username", self.username,
            "--os-password", self.password,
            "--os-tenant-name", self.tenant_name,
        ]
        if self.auth_url:
            args += ["--os-auth-url", self.auth_url]
        return args


def render_options(options: Optional[Mapping[str, OptionValue]]) -> List[str]:
    """Render an ordered option map as keystone arguments.

    ``True`` becomes a bare ``--key`` flag, ``False`` becomes ``--key false``
    and ``None`` is skipped. The empty key carries a positional value, which
    always goes last.
    """
    args: List[str] = []
    positional: List[str] = []
    for key, value in (options or {}).items():
        if value is None:
            continue
        if key == "":
            positional.append(str(value))
            continue
        args.append(f"--{key}")
        if value is True:
            continue
        args.append("false" if value is False else str(value))
    return args + positional


def mask_secrets(args: Sequence[str]) -> List[str]:
    """Copy of ``args`` with password values replaced, for logs and errors."""
    masked = list(args)
    for index, arg in enumerate(masked[:-1]):
        if arg in SECRET_FLAGS:
            masked[index + 1] = MASK
    return masked


class KeystoneCommand:
    """Invoke keystone sub-commands.

    Usage:
        command = KeystoneCommand(service_endpoint="http://kc:35357/v2.0", service_token="ADMIN")
        stdout = command.invoke("tenant-list")
    """

    def __init__(
        self,
        executable: str = "keystone",
        *,
        insecure: bool = False,
        service_endpoint: Optional[str] = None,
        service_token: Optional[str] = None,
        executor: Optional[CommandExecutor] = None,
    ):
        """Initialize the invoker.

        Args:
            executable: Name or path of the keystone tool
            insecure: Pass ``--insecure`` to skip TLS verification
            service_endpoint: Value for OS_SERVICE_ENDPOINT (left unset if None)
            service_token: Value for OS_SERVICE_TOKEN (left unset if None)
            executor: Process runner (defaults to SubprocessExecutor)
        """
        self.executable = executable
        self.insecure = insecure
        self.service_endpoint = service_endpoint
        self.service_token = service_token
        self.executor = executor or SubprocessExecutor()

    @classmethod
    def from_config(cls, config, executor: Optional[CommandExecutor] = None) -> "KeystoneCommand":
        """Build an invoker from a :class:`RegisterConfig`."""
        return cls(
            config.keystone_command,
            insecure=config.insecure,
            service_endpoint=config.service_endpoint,
            service_token=config.service_token,
            executor=executor,
        )

    def build_args(
        self,
        verb: str,
        options: Optional[Mapping[str, OptionValue]] = None,
        credentials: Optional[Credentials] = None,
    ) -> List[str]:
        args = [self.executable]
        if self.insecure:
            args.append("--insecure")
        if credentials is not None:
            args += credentials.as_args()
        args.append(verb)
        args += render_options(options)
        return args

    def build_env(self, credentials: Optional[Credentials] = None) -> Dict[str, Optional[str]]:
        """Environment overrides for one run.

        Credential runs clear the service endpoint and token, including any
        inherited from the calling process, since keystone prefers token auth
        over the ``--os-*`` flags.
        """
        env: Dict[str, Optional[str]] = {}
        if credentials is not None:
            env[SERVICE_ENDPOINT_ENV] = None
            env[SERVICE_TOKEN_ENV] = None
            return env
        if self.service_endpoint is not None:
            env[SERVICE_ENDPOINT_ENV] = self.service_endpoint
        if self.service_token is not None:
            env[SERVICE_TOKEN_ENV] = self.service_token
        return env

    def invoke(
        self,
        verb: str,
        options: Optional[Mapping[str, OptionValue]] = None,
        credentials: Optional[Credentials] = None,
    ) -> str:
        """Run one keystone sub-command and return its raw stdout.

        Args:
            verb: Sub-command (e.g. "tenant-create")
            options: Ordered option map, rendered in insertion order
            credentials: Run as this identity instead of the service token

        Returns:
            Raw standard output

        Raises:
            CommandError: If the tool exits with a non-zero status
        """
        args = self.build_args(verb, options, credentials)
        logger.debug("[keystone] Running %s", " ".join(mask_secrets(args)))
        result = self.executor.execute(args, self.build_env(credentials))
        if result.exit_code != 0:
            raise CommandError(result.exit_code, result.stderr, mask_secrets(args))
        return result.stdout
