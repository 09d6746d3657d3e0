from typing import Generic, TypeVar, Optional, Any, Dict, Union
from http import HTTPStatus

T = TypeVar('T')

StatusCode = Union[int, HTTPStatus]


class Result(Generic[T]):
    """
    Outcome of a step in the upload flow: either data or an error message.

    Steps such as decoding a workbook or looking up a file type return a
    Result instead of raising, so callers can branch on is_success() and the
    API layer can turn the attached HTTP status into a response.

    Attributes:
        success (bool): Whether the step succeeded
        data (Optional[T]): Payload of a successful step
        error (Optional[str]): Message describing a failed step
        status_code (HTTPStatus): Status the API reports for this outcome
    """
    def __init__(
        self,
        success: bool,
        data: Optional[T] = None,
        error: Optional[str] = None,
        status_code: Optional[StatusCode] = None
    ):
        self.success = success
        self.data = data
        self.error = error

        if status_code is None:
            self.status_code = HTTPStatus.OK if success else HTTPStatus.BAD_REQUEST
        else:
            self.status_code = HTTPStatus(status_code)

    @classmethod
    def ok(cls, data: T, status_code: Optional[StatusCode] = HTTPStatus.OK) -> "Result[T]":
        """
        Create a successful Result.

        Args:
            data (T): Payload of the step
            status_code (Optional[StatusCode], optional): Defaults to 200 OK.

        Returns:
            Result[T]: A successful Result carrying the payload
        """
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(cls, error: str, status_code: Optional[StatusCode] = HTTPStatus.BAD_REQUEST) -> "Result[T]":
        """
        Create a failed Result.

        Args:
            error (str): Message describing the failure
            status_code (Optional[StatusCode], optional): Defaults to 400 BAD_REQUEST.

        Returns:
            Result[T]: A failed Result carrying the message
        """
        return cls(success=False, error=error, status_code=status_code)

    @classmethod
    def not_found(cls, error: str = "Resource not found") -> "Result[T]":
        return cls(success=False, error=error, status_code=HTTPStatus.NOT_FOUND)

    @classmethod
    def unreadable_file(cls, error: str = "The file could not be read as a spreadsheet.") -> "Result[T]":
        """Failed Result for a byte stream that is not a readable workbook (422)."""
        return cls(success=False, error=error, status_code=HTTPStatus.UNPROCESSABLE_ENTITY)

    def is_success(self) -> bool:
        return self.success

    def is_failure(self) -> bool:
        return not self.success

    def unwrap(self, default: Optional[T] = None) -> Optional[T]:
        """
        Access the payload, falling back to a default for failures.

        Args:
            default (Optional[T], optional): Value returned when the Result failed

        Returns:
            Optional[T]: The payload or the default
        """
        return self.data if self.is_success() else default

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the Result to a dictionary suitable for API responses.

        Returns:
            Dict[str, Any]: success flag, status code and phrase, data or error
        """
        response = {
            "success": self.success,
            "status_code": self.status_code.value,
            "status": self.status_code.phrase
        }

        if self.is_success():
            response["data"] = self.data
        else:
            response["error"] = self.error

        return response

    def __str__(self) -> str:
        status_info = f"{self.status_code.value} {self.status_code.phrase}"
        if self.is_success():
            data_repr = str(self.data)
            if len(data_repr) > 100:
                data_repr = f"{data_repr[:97]}..."
            return f"Success ({status_info}): {data_repr}"
        return f"Failure ({status_info}): {self.error}"

    def __repr__(self) -> str:
        return f"Result(success={self.success}, status_code={self.status_code!r}, data={self.data!r}, error={self.error!r})"
