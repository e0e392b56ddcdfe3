"""
Helper utility functions for settings and artifact loading.

This module provides common utility functions used across the workflow,
including dictionary merging, YAML loading and file path handling.
"""

import copy
from pathlib import Path
from typing import Any, Dict, Union

import yaml


def deep_merge(dict1: Dict[str, Any], dict2: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with dict2 values overriding dict1.
    
    Nested dictionaries are merged recursively rather than replaced.
    
    Args:
        dict1: Base dictionary
        dict2: Override dictionary
        
    Returns:
        New dictionary with merged values
        
    Example:
        >>> deep_merge({"tags": {"a": "1"}, "location": "westus"}, {"tags": {"b": "2"}})
        {'tags': {'a': '1', 'b': '2'}, 'location': 'westus'}
    """
    result = copy.deepcopy(dict1)
    
    for key, value in dict2.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    
    return result


def safe_load_yaml(file_path: Path) -> Dict[str, Any]:
    """
    Safely load YAML file with proper error handling.
    
    Args:
        file_path: Path to YAML file
        
    Returns:
        Parsed YAML content as dictionary
        
    Raises:
        FileNotFoundError: If file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If file is empty or doesn't contain a dictionary
    """
    validate_file_exists(file_path, "YAML file")
    
    try:
        with open(file_path, 'r', encoding='utf-8') as file:
            content = yaml.safe_load(file)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML in file {file_path}: {str(e)}")
        
    if content is None:
        raise ValueError(f"YAML file is empty: {file_path}")
        
    if not isinstance(content, dict):
        raise ValueError(f"YAML file must contain a dictionary, got {type(content).__name__}: {file_path}")
        
    return content


def validate_file_exists(file_path: Path, description: str) -> None:
    """
    Validate that a file exists and provide helpful error message.
    
    Args:
        file_path: Path to validate
        description: Human-readable description for error message
        
    Raises:
        FileNotFoundError: If file doesn't exist with descriptive message
    """
    if not file_path.exists():
        raise FileNotFoundError(
            f"{description} not found at '{file_path}'. "
            f"Please check the path and ensure the file exists."
        )
        
    if not file_path.is_file():
        raise FileNotFoundError(
            f"Expected a file but found directory at '{file_path}'. "
            f"Please check the path."
        )


def expand_path(path: Union[str, Path]) -> Path:
    """
    Expand a user-supplied path into an absolute Path.
    
    A leading ``~`` is expanded to the current user's home directory
    before the path is made absolute.
    
    Raises:
        ValueError: If path is empty
        
    Example:
        >>> expand_path("~/.ssh/id_rsa.pub")
        PosixPath('/home/azureuser/.ssh/id_rsa.pub')
    """
    if not path:
        raise ValueError("Path cannot be empty")
        
    return Path(path).expanduser().resolve()

