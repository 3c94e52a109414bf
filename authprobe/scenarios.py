"""
The five fixed probes against the admin-auth server.

Each scenario is independent: one failing to build or connect is reported
under its label and the run moves on to the next one. Nothing here decides
whether the server answered correctly; the raw responses are printed for a
human to read.
"""

import sys
from collections import namedtuple

from authprobe import config
from authprobe.envelope import build_envelope
from authprobe.errors import ProbeError
from authprobe.request import build_request
from authprobe.transport import send_request

# ANSI color codes
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
RESET = "\033[0m"

Scenario = namedtuple("Scenario", "label call_id method params auth_token")

SCENARIOS = [
    Scenario("Calling f with no auth", "1", "f", [3, 4], None),
    Scenario("Calling f with invalid auth", "1", "f", [3, 4], "user"),
    Scenario("Calling f with non-ASCII auth", "1", "f", [3, 4], b"non-\xf7ascii"),
    Scenario("Calling f with proper auth", "1", "f", [3, 4], "root"),
    Scenario("Calling g", "2", "g", [3, 4], None),
]


class ScenarioResult:
    """Outcome of one scenario: the raw response, or the error that stopped it"""

    def __init__(self, scenario, request=None, response=None, error=None, complete=True):
        self.scenario = scenario
        self.request = request
        self.response = response
        self.error = error
        # False when reading stopped on the idle timeout instead of a close
        self.complete = complete

    @property
    def ok(self):
        return self.error is None

    @property
    def timed_out(self):
        return self.ok and not self.complete


def show_bytes(data):
    """Decode for display without losing bytes that are not valid UTF-8"""
    return data.decode("utf-8", errors="backslashreplace")


class Console:
    """Prints scenario blocks and the summary to a stream"""

    def __init__(self, stream=None, color=False):
        self.stream = stream if stream is not None else sys.stdout
        self.color = color

    def paint(self, code, text):
        if not self.color:
            return text
        return f"{code}{text}{RESET}"

    def write(self, text=""):
        print(text, file=self.stream)

    def banner(self, title):
        self.write("=" * 60)
        self.write(title)
        self.write("=" * 60)

    def scenario(self, number, scenario):
        self.write(f"\n{self.paint(YELLOW, '[TEST]')} {number}. {scenario.label}:")

    def request(self, data, title="Request:"):
        self.write(self.paint(BLUE, title))
        self.write(show_bytes(data))
        self.write(self.paint(BLUE, "Response:"))

    def response(self, data):
        if data:
            self.write(show_bytes(data))
        else:
            self.write("(empty response)")

    def incomplete(self, read_timeout):
        self.write(f"{self.paint(YELLOW, '[WARN]')} no close from peer after {read_timeout}s; "
                   "response may be incomplete")

    def failure(self, error):
        self.write(f"{self.paint(RED, '[ERROR]')} {error}")

    def summary(self, results):
        self.write("")
        self.banner("Summary")
        failed = 0
        incomplete = 0
        for number, result in enumerate(results, 1):
            if not result.ok:
                status = self.paint(RED, "FAILED")
                failed += 1
            elif result.timed_out:
                status = self.paint(YELLOW, "INCOMPLETE")
                incomplete += 1
            else:
                status = self.paint(GREEN, "RESPONDED")
            self.write(f"{number}. {result.scenario.label:40} [{status}]")
        self.write("=" * 60)
        responded = len(results) - failed - incomplete
        self.write(f"Total: {len(results)}, Responded: {responded}, "
                   f"Incomplete: {incomplete}, Failed: {failed}")


def run_scenario(scenario, host=config.SERVER_HOST, port=config.SERVER_PORT,
                 framing=config.DEFAULT_FRAMING, send=send_request, **send_options):
    """Build, send and collect one scenario; ProbeErrors end up in the result"""
    result = ScenarioResult(scenario)
    try:
        body = build_request(scenario.call_id, scenario.method, scenario.params)
        wire = build_envelope(body, scenario.auth_token, host=host, framing=framing)
        result.request = wire.to_bytes()
        result.response, result.complete = send(wire, host=host, port=port, **send_options)
    except ProbeError as e:
        e.label = scenario.label
        result.error = e
    return result


def run_all(scenarios=None, console=None, show_request=False, request_title="Request:", **options):
    """Run every scenario in order, printing each as it completes"""
    if scenarios is None:
        scenarios = SCENARIOS
    if console is None:
        console = Console()
    read_timeout = options.get("read_timeout", config.READ_TIMEOUT)

    results = []
    for number, scenario in enumerate(scenarios, 1):
        console.scenario(number, scenario)
        result = run_scenario(scenario, **options)
        if show_request and result.request is not None:
            console.request(result.request, request_title)
        if result.ok:
            console.response(result.response)
            if result.timed_out:
                console.incomplete(read_timeout)
        else:
            console.failure(result.error)
        results.append(result)

    console.summary(results)
    return results
