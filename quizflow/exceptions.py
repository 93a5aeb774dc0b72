class QuizFlowError(Exception):
    """Base class for errors raised by the quiz session engine."""


class LoadError(QuizFlowError):
    """The quiz definition could not be fetched."""


class QuizNotFoundError(LoadError):
    def __init__(self, quiz_id):
        super().__init__(f"Quiz {quiz_id} not found")
        self.quiz_id = quiz_id


class NetworkError(LoadError):
    """Transport failure or unexpected response while loading a quiz."""


class SubmitError(QuizFlowError):
    """The answer set could not be delivered to (or graded by) the grading service."""
