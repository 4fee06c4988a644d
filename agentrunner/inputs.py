import base64
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from google.genai import types

from .types import Attachment, ContentPart, ImageContent, TextContent

FileInput = Union[str, Path]

# Map file extensions to MIME types
MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".heic": "image/heic",
    ".pdf": "application/pdf",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
}


# =============================================================================
# Text Helpers
# =============================================================================

def format_user_message(message: str, attachments: Sequence[Attachment]) -> str:
    """
    Append the paths of attached notes to the user message.

    The block is delimited by `###` lines so the model can tell it apart
    from what the user typed.

    Args:
        message (str): Text typed by the user.
        attachments (Sequence[Attachment]): Attached notes.

    Returns:
        str: The message, followed by the attachment block if there is one.
    """
    if not attachments:
        return message

    text = message + "\n###\nAttached Obsidian notes: "
    for note in attachments:
        text += f"\n{note['path']}"
    return text + "\n###\n"


# =============================================================================
# File Helpers
# =============================================================================

def read_file(file_path: FileInput) -> Tuple[bytes, str]:
    """
    Read a local file and guess its MIME type from the extension.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    mime_type = MIME_TYPES.get(path.suffix.lower(), "application/octet-stream")

    with open(path, "rb") as f:
        return f.read(), mime_type


def encode_file(file_path: FileInput) -> Tuple[str, str]:
    """
    Encode a local file to base64 for inline media parts.

    Args:
        file_path (Union[str, Path]): Path to the file.

    Returns:
        Tuple[str, str]: (base64 data, MIME type guessed from the extension).
    """
    data, mime_type = read_file(file_path)
    return base64.b64encode(data).decode("utf-8"), mime_type


def create_text_content(text: str) -> TextContent:
    return {"type": "text", "text": text}


def create_data_url_content(b64_data: str, mime_type: str) -> ImageContent:
    return {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{b64_data}"}}


# =============================================================================
# Provider Inputs
# =============================================================================

def prepare_gemini_parts(text: str, files: Sequence[FileInput]) -> List[types.Part]:
    """
    Build the Gemini parts for one user turn: the text, then one inline
    data part per file.
    """
    parts = [types.Part.from_text(text=text)]
    for file in files:
        data, mime_type = read_file(file)
        parts.append(types.Part.from_bytes(data=data, mime_type=mime_type))
    return parts


def prepare_openai_content(text: str, files: Sequence[FileInput]) -> List[ContentPart]:
    """
    Build the OpenAI content list for one user turn: the text, then one
    data URL part per file.
    """
    content: List[ContentPart] = [create_text_content(text)]
    for file in files:
        b64_data, mime_type = encode_file(file)
        content.append(create_data_url_content(b64_data, mime_type))
    return content
