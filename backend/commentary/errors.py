"""Exception hierarchy for the commentary pipeline."""

# Environment variable names per provider
API_KEY_ENV_VARS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "twelvelabs": "TWELVE_LABS_API_KEY",
    "elevenlabs": "ELEVENLABS_API_KEY",
}

VIDEO_ANALYSIS = "video-analysis"
COMMENTARY_GENERATION = "commentary-generation"
SPEECH_GENERATION = "speech-generation"


class CommentaryError(Exception):
    """Base exception for pipeline errors."""

    status_code = 500
    step = "unknown"


class InvalidInput(CommentaryError):
    """Raised when a request carries a missing or malformed parameter."""

    status_code = 400

    def __init__(self, message: str, detail: str | None = None, step: str = "validation"):
        super().__init__(message)
        self.detail = detail or message
        self.step = step


class UpstreamFailure(CommentaryError):
    """Raised when one of the external services reports an error."""

    status_code = 502

    def __init__(self, service: str, message: str):
        super().__init__(message)
        self.service = service
        self.step = service


class EmptyGeneration(UpstreamFailure):
    """Raised when the text generator returns no content."""

    def __init__(self, message: str = "No commentary generated from OpenAI"):
        super().__init__(COMMENTARY_GENERATION, message)


class MissingAPIKeyError(CommentaryError):
    """Raised when a collaborator is used without its API key."""

    def __init__(self, provider: str, step: str = "configuration"):
        env_var = API_KEY_ENV_VARS.get(provider, f"{provider.upper()}_API_KEY")
        super().__init__(f"{env_var} environment variable is not set")
        self.provider = provider
        self.step = step
