"""Exceptions raised while building or sending a probe request"""


class ProbeError(Exception):
    """Base class; ``label`` names the scenario once the driver knows it"""

    def __init__(self, message, label=None):
        super().__init__(message)
        self.message = message
        self.label = label

    def __str__(self):
        if self.label:
            return f"{self.label}: {self.message}"
        return self.message


class BuildError(ProbeError):
    """The call could not be turned into a JSON-RPC body"""


class TransportError(ProbeError):
    """Connecting to, writing to, or reading from the server failed"""

    def __init__(self, message, host=None, port=None, label=None):
        super().__init__(message, label=label)
        self.host = host
        self.port = port

    @property
    def endpoint(self):
        return f"{self.host}:{self.port}"

    def __str__(self):
        text = f"{self.endpoint}: {self.message}"
        if self.label:
            return f"{self.label}: {text}"
        return text
