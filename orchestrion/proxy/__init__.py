"""Go tool invocations: generic, compile and link commands, and their parsing."""