"""日志工具测试"""

import logging

from infrastructure.utils.logger import SensitiveInfoFilter, sanitize_message


def test_sanitize_message_masks_home_directories():
    assert sanitize_message("/home/alice/proj/circuit_config.json") == "/home/***/proj/circuit_config.json"
    assert sanitize_message("/Users/bob/x") == "/Users/***/x"
    assert sanitize_message(r"C:\Users\carol\x") == r"C:\Users\***\x"
    assert sanitize_message("") == ""


def test_filter_masks_message_and_args():
    record = logging.LogRecord("circuit", logging.INFO, __file__, 1,
                               "保存 %s 到 %d 号", ("/home/alice/p", 3), None)
    assert SensitiveInfoFilter().filter(record)
    assert record.getMessage() == "保存 /home/***/p 到 3 号"
