'''
titlefetchのエントリーポイント
`python -m titlefetch URL ...` で CLI を起動する
'''

from titlefetch.cli.main import main

raise SystemExit(main())
