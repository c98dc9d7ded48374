from setuptools import setup, find_packages

setup(
    name='luapack',
    version='0.1.0',
    py_modules=['luapack'],
    packages=find_packages(include=['luacore', 'luacore.*']),
    package_data={
        'luacore.runtime': ['*.lua'],
    },
    install_requires=[
        'lark>=1.1',
        'pydantic>=2.0',
    ],
    extras_require={
        'test': [
            'pytest',
            'lupa>=2.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'luapack = luapack:main',
        ],
    },
)
