"""Pytest shared fixtures: a scripted stand-in for the keystone tool."""
import pathlib
import sys
from typing import Dict, List, Optional, Tuple

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from identity_register.core.keystone import CommandResult, KeystoneCommand


def render_table(columns: List[str], rows: List[List[str]]) -> str:
    """Render rows the way keystone's prettytable output looks."""
    widths = [max([len(c)] + [len(str(r[i])) for r in rows]) for i, c in enumerate(columns)]
    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def line(cells):
        return "| " + " | ".join(str(c).ljust(w) for c, w in zip(cells, widths)) + " |"

    out = [border, line(columns), border]
    out += [line(r) for r in rows]
    out.append(border)
    return "\n".join(out) + "\n"


def split_args(args: List[str]) -> Tuple[str, Dict[str, str], List[str], Dict[str, str]]:
    """Split an argv into (verb, options, positionals, credential flags)."""
    tokens = list(args[1:])
    creds: Dict[str, str] = {}
    while tokens and tokens[0].startswith("--"):
        flag = tokens.pop(0)
        if flag == "--insecure":
            continue
        creds[flag[2:]] = tokens.pop(0)
    verb = tokens.pop(0)
    options: Dict[str, str] = {}
    positionals: List[str] = []
    while tokens:
        token = tokens.pop(0)
        if token.startswith("--"):
            if tokens and not tokens[0].startswith("--"):
                options[token[2:]] = tokens.pop(0)
            else:
                options[token[2:]] = "true"
        else:
            positionals.append(token)
    return verb, options, positionals, creds


class FakeKeystone:
    """In-memory identity service driven through keystone-style argv.

    Listings print the same columns as the real tool, including ones the
    lookups never filter on (``enabled``, ``secret``, endpoint URLs).
    Like keystone, an exported service token wins over ``--os-*`` flags.
    """

    def __init__(self):
        self.calls: List[Tuple[List[str], Dict[str, str]]] = []
        self.failures: Dict[str, CommandResult] = {}
        self.tenants: Dict[str, str] = {}
        self.roles: Dict[str, str] = {}
        self.users: Dict[str, Dict[str, str]] = {}
        self.grants: set = set()
        self.ec2: Dict[Tuple[str, str], Tuple[str, str]] = {}
        self.services: List[Dict[str, str]] = []
        self.endpoints: List[Dict[str, str]] = []
        self._seq = 0

    # helpers ---------------------------------------------------------------
    def _new_id(self) -> str:
        self._seq += 1
        return f"{self._seq:032x}"

    @property
    def verbs(self) -> List[str]:
        return [split_args(args)[0] for args, _ in self.calls]

    def execute(self, args, env):
        self.calls.append((list(args), dict(env)))
        verb, options, positionals, creds = split_args(list(args))
        if verb in self.failures:
            return self.failures[verb]
        if env.get("OS_SERVICE_TOKEN"):
            creds = {}
        handler = getattr(self, "do_" + verb.replace("-", "_"))
        return handler(options, positionals, creds)

    @staticmethod
    def ok(stdout: str = "") -> CommandResult:
        return CommandResult(0, stdout, "")

    # verbs -----------------------------------------------------------------
    def do_tenant_list(self, options, positionals, creds):
        return self.ok(render_table(["id", "name", "enabled"], [[i, n, "True"] for n, i in self.tenants.items()]))

    def do_tenant_create(self, options, positionals, creds):
        self.tenants[options["name"]] = self._new_id()
        return self.ok()

    def do_role_list(self, options, positionals, creds):
        return self.ok(render_table(["id", "name"], [[i, n] for n, i in self.roles.items()]))

    def do_role_create(self, options, positionals, creds):
        self.roles[options["name"]] = self._new_id()
        return self.ok()

    def do_user_list(self, options, positionals, creds):
        tenant_id = options.get("tenant-id")
        rows = [
            [u["id"], n, "True", ""] for n, u in self.users.items()
            if tenant_id is None or u["tenant_id"] == tenant_id
        ]
        return self.ok(render_table(["id", "name", "enabled", "email"], rows))

    def do_user_create(self, options, positionals, creds):
        self.users[options["name"]] = {
            "id": self._new_id(),
            "tenant_id": options["tenant-id"],
            "password": options["pass"],
        }
        return self.ok()

    def do_user_password_update(self, options, positionals, creds):
        self.users[positionals[0]]["password"] = options["pass"]
        return self.ok()

    def do_token_get(self, options, positionals, creds):
        user = self.users.get(creds.get("os-username"))
        if user is None or user["password"] != creds.get("os-password"):
            return CommandResult(1, "", "Invalid user / password (HTTP 401)")
        return self.ok(render_table(["Property", "Value"], [["id", "token"], ["user_id", user["id"]]]))

    def do_user_role_list(self, options, positionals, creds):
        key = (options["tenant-id"], options["user-id"])
        rows = [
            [role_id, name] for name, role_id in self.roles.items()
            if key + (role_id,) in self.grants
        ]
        return self.ok(render_table(["id", "name"], rows))

    def do_user_role_add(self, options, positionals, creds):
        self.grants.add((options["tenant-id"], options["user-id"], options["role-id"]))
        return self.ok()

    def do_ec2_credentials_list(self, options, positionals, creds):
        tenant_names = {i: n for n, i in self.tenants.items()}
        rows = [
            [tenant_names[tenant_id], access, secret]
            for (tenant_id, user_id), (access, secret) in self.ec2.items()
            if user_id == options.get("user-id")
        ]
        return self.ok(render_table(["tenant", "access", "secret"], rows))

    def do_ec2_credentials_create(self, options, positionals, creds):
        access, secret = self._new_id(), self._new_id()
        self.ec2[(options["tenant-id"], options["user-id"])] = (access, secret)
        return self.ok(render_table(
            ["Property", "Value"],
            [["access", access], ["secret", secret], ["tenant_id", options["tenant-id"]],
             ["user_id", options["user-id"]]],
        ))

    def do_service_list(self, options, positionals, creds):
        columns = ["id", "name", "type", "description"]
        return self.ok(render_table(columns, [[s[c] for c in columns] for s in self.services]))

    def do_service_create(self, options, positionals, creds):
        self.services.append({
            "id": self._new_id(),
            "name": options["name"],
            "type": options["type"],
            "description": options.get("description", ""),
        })
        return self.ok()

    def do_service_delete(self, options, positionals, creds):
        self.services = [s for s in self.services if s["id"] != positionals[0]]
        return self.ok()

    def do_endpoint_list(self, options, positionals, creds):
        columns = ["id", "region", "publicurl", "internalurl", "adminurl", "service_id"]
        return self.ok(render_table(columns, [[e[c] for c in columns] for e in self.endpoints]))

    def do_endpoint_create(self, options, positionals, creds):
        self.endpoints.append(dict(options, id=self._new_id()))
        return self.ok()

    def do_endpoint_delete(self, options, positionals, creds):
        self.endpoints = [e for e in self.endpoints if e["id"] != positionals[0]]
        return self.ok()


@pytest.fixture
def keystone():
    return FakeKeystone()


@pytest.fixture
def command(keystone):
    return KeystoneCommand(
        "keystone",
        service_endpoint="http://keystone:35357/v2.0",
        service_token="ADMIN",
        executor=keystone,
    )


class RecordingExecutor:
    """Executor that replays canned results in order and records every call."""

    def __init__(self, results: Optional[List[CommandResult]] = None):
        self.results = list(results or [])
        self.calls: List[Tuple[List[str], Dict[str, str]]] = []

    def execute(self, args, env):
        self.calls.append((list(args), dict(env)))
        if self.results:
            return self.results.pop(0)
        return CommandResult(0, "", "")


@pytest.fixture
def recorder():
    return RecordingExecutor()
