"""
Tests that exhausted reconnection attempts stop the whole process.
"""

import os
import subprocess
import sys
import textwrap
from pathlib import Path

from connection_management import EXIT_RETRIES_EXHAUSTED

PROJECT_ROOT = Path(__file__).resolve().parent.parent

UNREACHABLE_SERVICE = textwrap.dedent("""
    import asyncio

    from redis.exceptions import TimeoutError as RedisTimeoutError

    from connection_management import BackoffPolicy, ConnectionSupervisor, EndpointList


    class UnreachableRedis:
        async def ping(self):
            raise RedisTimeoutError("Timeout connecting to server")

        async def aclose(self):
            pass


    async def main():
        supervisor = ConnectionSupervisor(
            EndpointList.from_uris(["redis://a:6379"]),
            lambda endpoint: UnreachableRedis(),
            policy=BackoffPolicy(base_interval=0.0, max_retries=0),
        )
        await supervisor.start()
        await asyncio.sleep(10)


    asyncio.run(main())
    print("STILL ALIVE")
""")


def test_exhausted_retries_exit_process_with_error_code():
    paths = [str(PROJECT_ROOT), os.environ.get("PYTHONPATH", "")]
    env = dict(os.environ, PYTHONPATH=os.pathsep.join(p for p in paths if p))

    result = subprocess.run(
        [sys.executable, "-c", UNREACHABLE_SERVICE],
        cwd=str(PROJECT_ROOT),
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
    )

    assert result.returncode == EXIT_RETRIES_EXHAUSTED, result.stderr
    assert "STILL ALIVE" not in result.stdout
