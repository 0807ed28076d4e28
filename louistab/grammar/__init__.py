# louistab/grammar/__init__.py
"""점자 테이블 문법 계층: 값/규칙 AST, 기본 문법, opcode 문법, 조립기."""
