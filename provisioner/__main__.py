from provisioner.main import main

raise SystemExit(main())
