"""Text recognition and speech synthesis outputs."""

from morphit.formats.models import OCRFormat, SpeechFormat

OCR_FORMATS: dict[str, OCRFormat] = {
    fmt.id: fmt
    for fmt in (
        OCRFormat(
            id="txt",
            extension="txt",
            display_name="Plain Text",
            description="Simple text extraction without formatting",
            mode="image",
        ),
        OCRFormat(
            id="txt-extract",
            extension="txt",
            display_name="Plain Text (Extract)",
            description="Copy the embedded text layer of each page",
            mode="extract",
        ),
        OCRFormat(
            id="txt-ocr",
            extension="txt",
            display_name="Plain Text (OCR)",
            description="Render each page and recognize the text in it",
            mode="pdf_ocr",
        ),
    )
}

SPEECH_FORMATS: dict[str, SpeechFormat] = {
    fmt.id: fmt
    for fmt in (
        SpeechFormat(
            id="aiff",
            extension="aiff",
            display_name="AIFF",
            description=(
                "Lossless, but the files are quite large. "
                "Standard on Apple platforms, but less common than WAV elsewhere."
            ),
            say_args=("--file-format=AIFF",),
        ),
        SpeechFormat(
            id="m4a",
            extension="m4a",
            display_name="M4A",
            description=(
                "Lossy, though less than MP3. The files are very compact, "
                "and are generally well supported by most applications."
            ),
            lossy=True,
            say_args=("--file-format=m4af", "--data-format=aac"),
        ),
        SpeechFormat(
            id="wav",
            extension="wav",
            display_name="WAV",
            description=(
                "Lossless, but the files are enormous. "
                "They can be played by almost any application."
            ),
            say_args=("--file-format=WAVE",),
        ),
        SpeechFormat(
            id="caf",
            extension="caf",
            display_name="CAF",
            description=(
                "Apple's flexible audio container format. "
                "Supports both lossy and lossless codecs."
            ),
            say_args=("--file-format=caff",),
        ),
    )
}

# Inputs the synthesizer reads verbatim
SPEECH_INPUT_EXTENSIONS = frozenset({"txt", "text"})
