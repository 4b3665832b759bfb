"""Exception taxonomy for the note-to-flashcard pipeline.

None of these escape the batch entry points: each is contained at the
smallest scope that raised it (sentence, unit or note) and logged.
"""


class NoteStudyError(Exception):
    pass


class RecognitionFailure(NoteStudyError):
    """OCR reported an error or the note carried no usable image."""
    pass


class TaggingFailure(NoteStudyError):
    """The sentence tagger was unavailable or failed on one unit."""
    pass


class MalformedCapture(NoteStudyError):
    """A pattern matched but one of its captures was empty after trimming."""
    pass


class NoteTimeout(NoteStudyError):
    pass


class NoteCancelled(NoteStudyError):
    pass
