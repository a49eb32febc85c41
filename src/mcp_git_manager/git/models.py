"""Pydantic input models for MCP Git Manager tools"""

from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field


def _reject_option_like(value: str) -> str:
    # Values are passed as separate argv entries; a leading dash would still be
    # read by git as an option.
    if value.startswith("-"):
        raise ValueError("must not start with '-'")
    return value


GitArgument = Annotated[str, AfterValidator(_reject_option_like)]


class LoadConfig(BaseModel):
    working_dir: str = Field(
        description="Working directory path (absolute or relative to where the server is run)"
    )


class GetConfig(BaseModel):
    pass


class GetInit(BaseModel):
    remoteUrl: GitArgument = Field(
        description="The URL of the remote repository (e.g., git@github.com:user/repo.git)"
    )
    defaultBranch: Optional[GitArgument] = Field(
        default=None,
        description="Optional name for the default branch (e.g., 'main')",
    )


class GetPull(BaseModel):
    branch: Optional[GitArgument] = Field(
        default=None,
        description="The branch to pull. Defaults to the current branch if not specified.",
    )
    remote: GitArgument = Field(
        default="origin",
        description="The remote to pull from. Defaults to 'origin'.",
    )


class GetPush(BaseModel):
    commitMessage: str = Field(description="Commit message for the changes.")
    branch: Optional[GitArgument] = Field(
        default=None,
        description="The branch to push to. Defaults to the current branch if not specified.",
    )
    remote: GitArgument = Field(
        default="origin",
        description="The remote to push to. Defaults to 'origin'.",
    )
