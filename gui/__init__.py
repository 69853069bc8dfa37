# Copyright (c) 2026 Stephen P Smith
# MIT License
