DEFAULT_MODEL_NAME = "gemini-2.5-flash-image"
DEFAULT_PROMPT = "a little boy age about 7 years old playing with lego bricks on a green play field"
DEFAULT_MIME_TYPE = "image/png"

DATA_URI_SCHEME = "data:"
BASE64_MARKER = ";base64,"

DOWNLOAD_FILENAME = "generated-image"

TEXT_ONLY_MESSAGE_PREFIX = "Model returned text instead of an image: "
EMPTY_RESPONSE_MESSAGE = "No image was generated. Please try a different prompt."
GENERIC_FAILURE_MESSAGE = "An error occurred during image generation."

# Prompt chars shown in debug logs
N_DEBUG_PROMPT_CHARS = 80
