from ffrender.cli import main

raise SystemExit(main())
