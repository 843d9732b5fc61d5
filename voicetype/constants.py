"""Provider tables, timeouts, and every user-facing or log message."""

# Providers
PROVIDER_OPENAI = "openai"
PROVIDER_GROQ = "groq"
DEFAULT_PROVIDER = PROVIDER_OPENAI

PROVIDER_BASE_URLS = {
    PROVIDER_OPENAI: "https://api.openai.com/v1",
    PROVIDER_GROQ: "https://api.groq.com/openai/v1",
}
TRANSCRIPTION_MODELS = {
    PROVIDER_OPENAI: "whisper-1",
    PROVIDER_GROQ: "whisper-large-v3-turbo",
}
COMPLETION_MODELS = {
    PROVIDER_OPENAI: "gpt-4o-mini",
    PROVIDER_GROQ: "llama-3.3-70b-versatile",
}

# Upstream paths
TRANSCRIPTIONS_PATH = "/audio/transcriptions"
COMPLETIONS_PATH = "/chat/completions"
RESPONSE_FORMAT_TEXT = "text"

# Relay paths
RELAY_TRANSCRIBE_PATH = "/api/transcribe"
RELAY_POLISH_PATH = "/api/polish"
RELAY_HEALTH_PATH = "/health"

# Execution environments
ENV_NATIVE = "native"
ENV_WEB = "web"

# Timeouts (milliseconds). One attempt per operation, no retries.
TRANSCRIBE_TIMEOUT_MS = 60_000
POLISH_TIMEOUT_MS = 30_000
LABEL_TRANSCRIPTION = "Transcription"
LABEL_POLISH = "Polish"
LABEL_CREDENTIAL = "Credential lookup"

# Audio
DEFAULT_EXTENSION = "m4a"
DEFAULT_MIME_TYPE = "audio/m4a"
MIME_TYPES = {
    "webm": "audio/webm",
    "mp4": "audio/mp4",
    "caf": "audio/x-caf",
    "m4a": DEFAULT_MIME_TYPE,
}
RECORDING_FILENAME = "recording.%s"
DATA_URI_PREFIX = "data:"
FILE_URI_PREFIX = "file://"
# Anything smaller cannot hold a container header plus audio frames.
MIN_AUDIO_BYTES = 1024
MIN_RECORDING_SECONDS = 0.5

# Polish request
POLISH_SYSTEM_PROMPT = (
    "You are a text editor. Fix any transcription errors, add proper punctuation, "
    "capitalize sentences, and format the text naturally. Do NOT change the meaning "
    "or add new content. Return ONLY the corrected text with no explanation."
)
POLISH_TEMPERATURE = 0.1
POLISH_MAX_TOKENS = 2048

# User-facing messages
MSG_NO_CREDENTIAL = "No API key configured for %s. Add your key in Settings."
MSG_INVALID_API_KEY = "Invalid API key. Please check your key in Settings."
MSG_RATE_LIMITED = "Rate limit exceeded. Please wait a moment and try again."
MSG_TOO_LONG = "Recording is too long. Try a shorter recording."
MSG_BAD_AUDIO_FORMAT = "Audio format not supported. Please try recording again."
MSG_BAD_REQUEST = "Request error: %s"
MSG_UPSTREAM_FAILED = "Transcription failed (%d): %s"
MSG_NO_SPEECH = "No speech detected. Please speak clearly and try again."
MSG_TIMEOUT = "%s timed out after %gs. Check your internet connection and try again."
MSG_NETWORK_ERROR = "Network error while contacting the server. Please check your internet connection."
MSG_AUDIO_UNREADABLE = "Failed to read audio: %s"
MSG_AUDIO_TOO_SMALL = "Recording is too short or empty. Please try again."
MSG_RECORDING_TOO_SHORT = "Recording was too short. Please try again."
MSG_HTTP_STATUS = "HTTP %d"
MSG_SERVER_ERROR = "Server error (%d)"

# Relay replies
MSG_RELAY_MISSING_FIELDS = "Missing required fields"
MSG_RELAY_BAD_AUDIO = "audioBase64 is not valid base64"
MSG_RELAY_UNKNOWN_PROVIDER = "Unknown provider: %s"
MSG_RELAY_INTERNAL = "Internal server error"

# Log messages
LOG_TRANSCRIBING = "→ Transcribing %s (%d bytes) via %s"
LOG_TRANSCRIBED = "✓ Transcribed %d chars (%.1fs)"
LOG_POLISHING = "→ Polishing %d chars via %s"
LOG_BEST_EFFORT_FAILED = "%s failed, using fallback: %s"
LOG_STEP_FAILED = "✗ %s failed: %s"
LOG_STATE = "→ %s"
LOG_TIMEOUT = "%s exceeded %d ms, request cancelled"
LOG_RELAY_STARTING = "Starting relay on %s:%d"
LOG_RELAY_UPSTREAM_ERROR = "%s proxy upstream error (%d)"
LOG_RELAY_ERROR = "%s proxy error: %s"

# History
HISTORY_MAX_ENTRIES = 100
