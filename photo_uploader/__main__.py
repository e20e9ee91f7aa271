from __future__ import annotations

from .publisher import main

raise SystemExit(main())
