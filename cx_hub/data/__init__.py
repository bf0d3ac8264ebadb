"""包内自带的静态配置文件。"""
