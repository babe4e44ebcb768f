from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
import subprocess


@dataclass(frozen=True)
class Instance:
    name: str
    instance_id: str
    public_address: Optional[str] = None
    private_address: Optional[str] = None
    instance_type: str = ""
    tags: Dict[str, str] = field(default_factory=dict)
    key_name: Optional[str] = None  # EC2 key pair, resolved to ~/.ssh/<key_name>.pem
    region: Optional[str] = None


@dataclass(frozen=True)
class DatabaseInstance:
    endpoint: str
    engine: str
    region: Optional[str] = None
    identifier: Optional[str] = None
    port: Optional[int] = None  # informational, the tunnel uses the engine profile port

    @property
    def name(self) -> str:
        return self.endpoint.split(".")[0]


@dataclass(frozen=True)
class EnvironmentRule:
    prefix: str  # empty string matches everything, keep it last
    jump_host: str
    region: Optional[str] = None


@dataclass(frozen=True)
class CredentialRule:
    prefix: str
    database: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None


@dataclass(frozen=True)
class EngineProfile:
    port: int
    client: str
    fallback_client: str

    @property
    def clients(self) -> Tuple[str, str]:
        return (self.client, self.fallback_client)


@dataclass(frozen=True)
class ConnectionParams:
    filter: str
    args: Tuple[str, ...] = ()
    output: bool = False          # capture remote output to a local file
    all: bool = False             # run against every match
    use_jump_host: bool = False   # route through the jump host even with a public address


@dataclass(frozen=True)
class Configuration:
    regions: Tuple[str, ...] = ("us-east-1", "us-west-2")
    environments: Tuple[EnvironmentRule, ...] = ()
    credentials: Tuple[CredentialRule, ...] = ()
    ssh_connect_timeout: int = 10
    tunnel_timeout: float = 30.0


@dataclass
class Tunnel:
    local_port: int
    process: subprocess.Popen
    endpoint: str
    remote_port: int
    jump_host: str
    local_host: str = "127.0.0.1"

    def is_running(self) -> bool:
        return self.process.poll() is None


@dataclass
class Outcome:
    """Result of applying an action to one target in a batch."""
    target: object
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None
