import platform
import sys
import logging

log = logging.getLogger("codechallenge")


def startup_banner(
    *,
    api: str,
    auth: str,
    commands: int,
    version: str,
    mode: str,
) -> None:
    python_ver = sys.version.split()[0]
    os_name = platform.system()

    rows = [
        ("CORE", f"CodeChallenge v{version}"),
        ("ENV", mode),
        ("RUNTIME", f"Python {python_ver}"),
        ("HOST", os_name),
        ("CHALLENGES", api),
        ("IDENTITY", auth),
        ("COMMANDS", str(commands)),
    ]

    width = 44
    line = "─" * width

    log.info(line)
    log.info(" </> CodeChallenge is online")
    log.info("")

    label_width = max(len(k) for k, _ in rows)

    for k, v in rows:
        log.info("%s : %s", k.ljust(label_width), v)

    log.info(line)
