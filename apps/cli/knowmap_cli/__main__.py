from knowmap_cli.main import main

raise SystemExit(main())
