from pydantic import BaseModel, ConfigDict, Field


class RemoteSessionHandle(BaseModel):
    """A disposable Browserbase session, used for exactly one extraction."""

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(description="Browserbase session id")
    debug_view_url: str = Field(description="Live fullscreen debugger view of the session")
    selenium_remote_url: str = Field(
        default="",
        exclude=True,
        description="WebDriver endpoint of the remote browser",
    )
    signing_key: str = Field(
        default="",
        exclude=True,
        repr=False,
        description="Per-session key authorising WebDriver connections",
    )
