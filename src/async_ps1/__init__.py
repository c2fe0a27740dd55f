"""
Asynchronous, Git-aware shell prompt

``async-ps1`` renders a colored prompt for zsh, Bash, or a plain terminal
showing the exit status of the last command, the user & host, an abbreviated
working directory, a vi mode indicator, and the current Git branch along with
symbols for the changes in the working copy.

Features:

- Shows the hostname only when connected over SSH or running as root
- Abbreviates the current directory path in the manner of Bash's
  ``PROMPT_DIRTRIM``
- Computes the Git status in the background so that the prompt is never held
  up by ``git status`` in large repositories, using either a worker thread on
  the running event loop or a child process that signals when it is done
- Strips colors from the prompt when the terminal does not support them
- Supports custom prompt templates written in a subset of zsh's prompt syntax

Visit <https://github.com/async-ps1/async-ps1> for more information.
"""

__version__ = "0.1.0"
__license__ = "MIT"
__url__ = "https://github.com/async-ps1/async-ps1"
