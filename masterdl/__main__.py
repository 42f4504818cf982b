from masterdl.cli import main

raise SystemExit(main())
