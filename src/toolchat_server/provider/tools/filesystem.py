"""File system tools.

Blocking file operations run in a worker thread so one slow disk call does
not stall other connections.
"""

import asyncio
import json
import logging
import shutil
from pathlib import Path

from pydantic import BaseModel, Field

from toolchat_server.provider.server import CapabilityServer, ToolEnvelope, text_content

logger = logging.getLogger(__name__)


class ReadFileArgs(BaseModel):
    filePath: str = Field(..., description="Full path to the file to read")


class ListDirectoryArgs(BaseModel):
    directoryPath: str = Field(..., description="Path to the directory to list contents from")


class WriteFileArgs(BaseModel):
    filePath: str = Field(..., description="Full path to the file to write")
    content: str = Field(..., description="Content to write to the file")


class CreateDirectoryArgs(BaseModel):
    directoryPath: str = Field(..., description="Path of the directory to create")


class DeleteItemArgs(BaseModel):
    itemPath: str = Field(..., description="Path to the file or directory to delete")


class SearchFilesArgs(BaseModel):
    directory: str = Field(..., description="Directory to start the search from")
    searchTerm: str = Field(
        ..., description="Term to search for in file and directory names"
    )


def _entry(path: Path) -> dict[str, str]:
    return {
        "name": path.name,
        "type": "directory" if path.is_dir() else "file",
        "path": str(path),
    }


def list_directory(directory: Path) -> list[dict[str, str]]:
    return [_entry(child) for child in sorted(directory.iterdir())]


def search_files(directory: Path, term: str) -> list[dict[str, str]]:
    """Find entries below directory whose name contains term, case-insensitively.

    Subdirectories that cannot be read are skipped.
    """
    needle = term.lower()
    results: list[dict[str, str]] = []
    pending = [directory]

    while pending:
        current = pending.pop(0)
        try:
            children = sorted(current.iterdir())
        except OSError:
            if current == directory:
                raise
            logger.debug(f"Skipping unreadable directory {current}")
            continue

        for child in children:
            if needle in child.name.lower():
                results.append(_entry(child))
            if child.is_dir() and not child.is_symlink():
                pending.append(child)

    return results


def delete_item(path: Path) -> str:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return f"Successfully deleted directory: {path}"
    path.unlink()
    return f"Successfully deleted file: {path}"


def register(server: CapabilityServer) -> None:
    @server.tool("readFile", "Read content of a file at the specified path", ReadFileArgs)
    async def read_file(args: ReadFileArgs) -> ToolEnvelope:
        content = await asyncio.to_thread(Path(args.filePath).read_text, encoding="utf-8")
        return text_content(content)

    @server.tool(
        "listDirectory", "List files and folders in a directory", ListDirectoryArgs
    )
    async def list_directory_tool(args: ListDirectoryArgs) -> ToolEnvelope:
        entries = await asyncio.to_thread(list_directory, Path(args.directoryPath))
        return text_content(json.dumps(entries, indent=2))

    @server.tool("writeFile", "Write content to a file", WriteFileArgs)
    async def write_file(args: WriteFileArgs) -> ToolEnvelope:
        await asyncio.to_thread(
            Path(args.filePath).write_text, args.content, encoding="utf-8"
        )
        return text_content(f"Successfully wrote to file: {args.filePath}")

    @server.tool("createDirectory", "Create a new directory", CreateDirectoryArgs)
    async def create_directory(args: CreateDirectoryArgs) -> ToolEnvelope:
        await asyncio.to_thread(
            Path(args.directoryPath).mkdir, parents=True, exist_ok=True
        )
        return text_content(f"Successfully created directory: {args.directoryPath}")

    @server.tool("deleteItem", "Delete a file or directory", DeleteItemArgs)
    async def delete_item_tool(args: DeleteItemArgs) -> ToolEnvelope:
        message = await asyncio.to_thread(delete_item, Path(args.itemPath))
        return text_content(message)

    @server.tool(
        "searchFiles",
        "Search for files and directories containing a term",
        SearchFilesArgs,
    )
    async def search_files_tool(args: SearchFilesArgs) -> ToolEnvelope:
        results = await asyncio.to_thread(
            search_files, Path(args.directory), args.searchTerm
        )
        return text_content(json.dumps(results, indent=2))
