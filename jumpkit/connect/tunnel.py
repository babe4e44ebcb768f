"""
Database sessions through an SSH port-forward on the environment's jump host.

The forwarding process is an ``ssh -N -L`` child owned by a single call. It is
started inside :func:`open_tunnel` and terminated when that block exits, on
success, on failure, and when the process receives SIGTERM or SIGHUP while
the tunnel is open.

Both PostgreSQL and MySQL client variables are exported so either family of
client (or any tool reading them) works against the tunnel unmodified.
"""
from __future__ import annotations

import os
import random
import shutil
import signal
import socket
import subprocess
import threading
import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence

from jumpkit.core.errors import ClientExitError, ClientNotFound, TunnelError, TunnelTimeout
from jumpkit.core.matcher import engine_profile, match_credentials, match_environment
from jumpkit.core.models import Configuration, CredentialRule, DatabaseInstance, EngineProfile, Outcome, Tunnel
from jumpkit.discovery import RDSFinder, discover
from jumpkit.utils.logging import get_logger
from .selector import select_and_apply
from .status import StatusIndicator, default_indicator

logger = get_logger(__name__)

PORT_RANGE = (40000, 60000)
POLL_INTERVAL = 0.1
PROBE_TIMEOUT = 1.0
TERMINATE_GRACE = 5.0

COLUMNS = ("Name", "Endpoint", "Engine")


def database_row(db: DatabaseInstance):
    return (db.name, db.endpoint, db.engine)


def choose_port(rng: random.Random) -> int:
    return rng.randrange(*PORT_RANGE)


def tunnel_command(local_port: int, endpoint: str, remote_port: int, jump_host: str) -> List[str]:
    return [
        "ssh",
        "-N",
        "-L",
        f"{local_port}:{endpoint}:{remote_port}",
        "-o",
        "ExitOnForwardFailure=yes",
        jump_host,
    ]


def tcp_probe(host: str, port: int, timeout: float = PROBE_TIMEOUT) -> bool:
    try:
        conn = socket.create_connection((host, port), timeout=timeout)
        conn.close()
        return True
    except OSError:
        return False


def wait_until_ready(
    tunnel: Tunnel,
    timeout: float,
    probe: Callable[[str, int], bool] = tcp_probe,
    interval: float = POLL_INTERVAL,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Poll the local end of the tunnel until it accepts connections.

    Raises:
        TunnelError: the forwarding process exited first (e.g. the port was taken).
        TunnelTimeout: the port did not open within ``timeout`` seconds.
    """
    deadline = clock() + timeout
    while True:
        if not tunnel.is_running():
            raise TunnelError(
                f"tunnel to {tunnel.endpoint} through {tunnel.jump_host} exited "
                f"with status {tunnel.process.returncode}"
            )
        if probe(tunnel.local_host, tunnel.local_port):
            return
        if clock() >= deadline:
            raise TunnelTimeout(tunnel.local_port, timeout)
        sleep(interval)


def stop_process(process: subprocess.Popen, grace: float = TERMINATE_GRACE) -> None:
    if process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        logger.warning(f"tunnel (pid={process.pid}) did not exit, sending SIGKILL")
        process.kill()
        process.wait()


def _exit_on_signal(signum, frame):
    raise SystemExit(128 + signum)


@contextmanager
def signals_as_exit(signals: Sequence[str] = ("SIGTERM", "SIGHUP")) -> Iterator[None]:
    """Turn termination signals into SystemExit so ``finally`` blocks run."""
    # signal handlers can only be installed from the main thread
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = {}
    for name in signals:
        sig = getattr(signal, name, None)
        if sig is not None:
            previous[sig] = signal.signal(sig, _exit_on_signal)
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@contextmanager
def sigint_ignored() -> Iterator[None]:
    """Let Ctrl-C reach the attached client without killing us."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


@contextmanager
def open_tunnel(
    endpoint: str,
    remote_port: int,
    jump_host: str,
    local_port: int,
    spawn: Callable[..., subprocess.Popen] = subprocess.Popen,
) -> Iterator[Tunnel]:
    cmd = tunnel_command(local_port, endpoint, remote_port, jump_host)
    logger.info(f"Connecting to {local_port}:{endpoint}:{remote_port} through {jump_host}")

    with signals_as_exit():
        # own session so Ctrl-C aimed at the client does not reach ssh
        try:
            process = spawn(cmd, stdin=subprocess.DEVNULL, start_new_session=True)
        except FileNotFoundError as e:
            raise ClientNotFound(f"Install {cmd[0]}.") from e
        tunnel = Tunnel(
            local_port=local_port,
            process=process,
            endpoint=endpoint,
            remote_port=remote_port,
            jump_host=jump_host,
        )
        try:
            yield tunnel
        finally:
            stop_process(process)
            logger.debug(f"tunnel on port {local_port} closed")


def client_environment(
    tunnel: Tunnel,
    credentials: CredentialRule,
    base: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    env = dict(os.environ if base is None else base)
    values = {
        "PGHOST": tunnel.local_host,
        "PGPORT": str(tunnel.local_port),
        "PGDATABASE": credentials.database,
        "PGUSER": credentials.user,
        "PGPASSWORD": credentials.password,
        "MYSQL_HOST": tunnel.local_host,
        "MYSQL_TCP_PORT": str(tunnel.local_port),
        "MYSQL_PWD": credentials.password,
    }
    env.update({key: value for key, value in values.items() if value})
    return env


def is_default_client(command: str, profile: EngineProfile) -> bool:
    return os.path.basename(command) in profile.clients


def client_command(
    args: Sequence[str],
    engine: str,
    profile: EngineProfile,
    credentials: CredentialRule,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> List[str]:
    args = list(args)
    if args and args[0] == "--":
        args = args[1:]

    if args:
        command, rest = args[0], args[1:]
    else:
        command = which(profile.client) or which(profile.fallback_client)
        if not command:
            raise ClientNotFound(f"Install {profile.client} and/or {profile.fallback_client}.")
        rest = []

    # psql/pgcli read everything from the environment, the mysql clients need these
    if engine == "mysql" and is_default_client(command, profile):
        if credentials.user:
            rest.append(f"-u{credentials.user}")
        if credentials.database:
            rest.append(credentials.database)

    return [command, *rest]


def run_attached(cmd: List[str], env: Mapping[str, str], popen: Callable[..., subprocess.Popen] = subprocess.Popen) -> int:
    try:
        process = popen(cmd, env=env)
    except FileNotFoundError as e:
        raise ClientNotFound(f"{cmd[0]} not found: {e}") from e
    with sigint_ignored():
        return process.wait()


class DatabaseConnector:
    def __init__(
        self,
        config: Configuration,
        status: Optional[StatusIndicator] = None,
        rng: Optional[random.Random] = None,
        lookup_secret: Optional[Callable[[str], str]] = None,
        spawn: Callable[..., subprocess.Popen] = subprocess.Popen,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        probe: Callable[[str, int], bool] = tcp_probe,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        self.config = config
        self.status = status or default_indicator()
        self.rng = rng
        self.lookup_secret = lookup_secret
        self.spawn = spawn
        self.popen = popen
        self.probe = probe
        self.which = which

    def connect(self, db: DatabaseInstance, args: Sequence[str] = ()) -> None:
        jump_host = match_environment(db.endpoint, self.config.environments).jump_host
        credentials = match_credentials(db.endpoint, self.config.credentials, self.lookup_secret)
        profile = engine_profile(db.engine)
        # fresh source per call unless one was injected
        port = choose_port(self.rng or random.Random())

        marked = False
        try:
            with open_tunnel(db.endpoint, profile.port, jump_host, port, spawn=self.spawn) as tunnel:
                logger.info("Waiting for tunnel...")
                wait_until_ready(tunnel, self.config.tunnel_timeout, probe=self.probe)

                env = client_environment(tunnel, credentials)
                cmd = client_command(args, db.engine, profile, credentials, which=self.which)

                logger.info(f"Running: {' '.join(cmd)}")
                self.status.connected(db.endpoint)
                marked = True
                returncode = run_attached(cmd, env, popen=self.popen)
        finally:
            if marked:
                self.status.disconnected()

        if returncode != 0:
            raise ClientExitError(os.path.basename(cmd[0]), returncode)


def connect_to_database(
    config: Configuration,
    filter: str,
    args: Sequence[str] = (),
    all_mode: bool = False,
    finder: Optional[RDSFinder] = None,
    connector: Optional[DatabaseConnector] = None,
    **selector_kwargs,
) -> List[Outcome]:
    finder = finder or RDSFinder()
    connector = connector or DatabaseConnector(config)

    databases = discover(finder, config.regions, filter)
    return select_and_apply(
        databases,
        lambda db: connector.connect(db, args),
        columns=COLUMNS,
        row=database_row,
        batch=all_mode,
        describe=lambda db: db.endpoint,
        **selector_kwargs,
    )
