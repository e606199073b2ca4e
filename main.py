"""
Main entry point for the QOD service.
Provides command-line interface and system initialization.
"""

import asyncio
import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from utils import api_logger, qm_logger, config_manager, parse_date, QodError

from quote_manager import quote_manager


class QodSystem:
    """QOD 服务主类"""

    def __init__(self):
        self.config = config_manager
        self.manager = quote_manager

    async def initialize(self):
        """初始化系统（建表）"""
        qm_logger.info("[Main] Initializing QOD service...")
        await self.manager.initialize()
        qm_logger.info("[Main] QOD service initialized successfully")

    async def start_api_server(self, host: str = None, port: int = None):
        """启动API服务器"""
        api_config = self.config.get_api_config()

        # 使用配置文件的值，如果命令行参数未提供
        final_host = host if host is not None else api_config.host
        final_port = port if port is not None else api_config.port

        api_logger.info(f"[Main] Starting API server on {final_host}:{final_port}...")
        api_logger.info(f"[Main] API config - workers: {api_config.workers}, reload: {api_config.reload}")

        import uvicorn
        from api.app import app as api_app

        config = uvicorn.Config(
            api_app,
            host=final_host,
            port=final_port,
            workers=api_config.workers,
            reload=api_config.reload,
            log_level="info"
        )
        server = uvicorn.Server(config)
        await server.serve()

    async def show_system_status(self):
        """显示系统状态"""
        stats = await self.manager.get_statistics()
        db_config = self.config.get_database_config()

        print("=" * 40)
        print("QOD service status")
        print("=" * 40)
        print(f"Database:            {db_config.db_path}")
        print(f"Quotes:              {stats['total_quotes']}")
        print(f"Sources:             {stats['total_sources']}")
        print(f"Unattributed quotes: {stats['unattributed_quotes']}")

    async def show_quote_of_day(self, target_date: Optional[date] = None):
        """打印每日名言"""
        quote = await self.manager.get_quote_of_day(target_date)
        source = quote['source']['name'] if quote['source'] else "Unknown"
        print(f"\"{quote['text']}\"")
        print(f"    -- {source}")

    async def import_quotes(self, file_path: str) -> int:
        """
        Import quotes from a JSON file.

        The file holds a list of objects with a ``text`` key and an optional
        ``source`` key naming the source; sources are matched by exact name
        and created when missing.
        """
        with open(Path(file_path), 'r', encoding='utf-8') as f:
            records = json.load(f)

        sources = {source['name']: source['id'] for source in await self.manager.list_sources()}
        imported = 0
        for record in records:
            source_name = record.get('source')
            if source_name and source_name not in sources:
                created = await self.manager.create_source(source_name)
                sources[source_name] = created['id']

            await self.manager.create_quote(
                record['text'],
                has_source=bool(source_name),
                source_id=sources.get(source_name) if source_name else None
            )
            imported += 1

        qm_logger.info(f"[Main] Imported {imported} quotes from {file_path}")
        return imported

    async def shutdown(self):
        """关闭数据库连接"""
        await self.manager.db_ops.db.close()


def create_parser():
    """创建命令行解析器"""
    parser = argparse.ArgumentParser(
        description="QOD - quotes, sources and the quote of the day",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  python main.py api --port 8080
  python main.py init-db
  python main.py import --file quotes.json
  python main.py qod --date 2024-01-01
  python main.py status
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='可用命令')

    api_parser = subparsers.add_parser('api', help='启动API服务器')
    api_parser.add_argument('--host', default=None, help='监听地址 (默认: 配置文件)')
    api_parser.add_argument('--port', type=int, default=None, help='监听端口 (默认: 配置文件)')

    subparsers.add_parser('init-db', help='创建数据库表')

    subparsers.add_parser('status', help='显示系统状态')

    qod_parser = subparsers.add_parser('qod', help='显示每日名言')
    qod_parser.add_argument('--date', type=str, help='日期 (YYYY-MM-DD，默认今天)')

    import_parser = subparsers.add_parser('import', help='从JSON文件导入名言')
    import_parser.add_argument('--file', required=True, help='JSON 文件路径')

    return parser


async def main():
    """主函数"""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    system = QodSystem()
    try:
        await system.initialize()

        if args.command == 'api':
            await system.start_api_server(host=args.host, port=args.port)

        elif args.command == 'init-db':
            print("Database tables are ready.")

        elif args.command == 'status':
            await system.show_system_status()

        elif args.command == 'qod':
            target_date = None
            if args.date:
                try:
                    target_date = parse_date(args.date)
                except ValueError:
                    print("错误: 日期格式无效，请使用 YYYY-MM-DD 格式")
                    sys.exit(1)
            await system.show_quote_of_day(target_date)

        elif args.command == 'import':
            count = await system.import_quotes(args.file)
            print(f"Imported {count} quotes.")

    except KeyboardInterrupt:
        qm_logger.info("[Main] Received keyboard interrupt")
    except QodError as e:
        qm_logger.error(f"[Main] {e}")
        sys.exit(1)
    finally:
        await system.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
